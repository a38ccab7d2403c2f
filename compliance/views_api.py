"""JSON / file endpoints for the admin FTA compliance screen. Staff only."""

import json
import logging
import time

from django.contrib.admin.views.decorators import staff_member_required
from django.http import HttpResponse, JsonResponse
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from compliance.exceptions import ComplianceError
from compliance.export_utils import render_faf_excel
from compliance.services.faf_export import FAFExportFilters, convert_faf_to_csv, generate_faf_export
from compliance.services.test_data_import import generate_sample_test_data, import_from_json
from compliance.services.vat_calculator import TAX_CODES
from compliance.services.vat_report import get_vat_return_report

logger = logging.getLogger("compliance")


class BadRequest(ValueError):
    pass


def _parse_date_param(value, name: str):
    """'' / None -> None; 'YYYY-MM-DD' -> date; ISO datetime -> datetime."""
    if value in (None, ""):
        return None
    text = str(value).strip()
    try:
        parsed = parse_datetime(text) if "T" in text or " " in text else parse_date(text)
    except ValueError:
        parsed = None
    if parsed is None:
        raise BadRequest(f"Invalid {name}: {value}")
    return parsed


def _parse_id_param(value, name: str):
    if value in (None, ""):
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise BadRequest(f"Invalid {name}: {value}")


def _filters_from(params) -> FAFExportFilters:
    return FAFExportFilters(
        start_date=_parse_date_param(params.get("startDate"), "startDate"),
        end_date=_parse_date_param(params.get("endDate"), "endDate"),
        spa_id=_parse_id_param(params.get("spaId"), "spaId"),
    )


def _json_body(request) -> dict:
    try:
        body = json.loads(request.body or "{}")
    except json.JSONDecodeError:
        raise BadRequest("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise BadRequest("JSON body must be an object")
    return body


@csrf_exempt
@require_http_methods(["POST"])
@staff_member_required
def api_export_faf(request):
    """
    POST /api/admin/export-faf/ {startDate, endDate, spaId?}
    Returns the FTA Audit File as a CSV download.
    """
    try:
        filters = _filters_from(_json_body(request))
    except BadRequest as e:
        return JsonResponse({"error": str(e)}, status=400)
    try:
        records = generate_faf_export(filters)
    except ComplianceError as e:
        return JsonResponse({"error": "FAF export failed", "detail": str(e)}, status=500)
    csv_content = convert_faf_to_csv(records)
    resp = HttpResponse(csv_content, content_type="text/csv; charset=utf-8")
    resp["Content-Disposition"] = 'attachment; filename="FAF_Export_%d.csv"' % int(time.time() * 1000)
    return resp


@csrf_exempt
@require_http_methods(["POST"])
@staff_member_required
def api_export_faf_excel(request):
    """POST /api/admin/export-faf/excel/ - same ledger as an .xlsx workbook."""
    try:
        filters = _filters_from(_json_body(request))
    except BadRequest as e:
        return JsonResponse({"error": str(e)}, status=400)
    try:
        records = generate_faf_export(filters)
    except ComplianceError as e:
        return JsonResponse({"error": "FAF export failed", "detail": str(e)}, status=500)
    period = "%s - %s" % (filters.start_date or "All time", filters.end_date or "All time")
    xlsx_bytes = render_faf_excel(records, period)
    resp = HttpResponse(xlsx_bytes, content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    resp["Content-Disposition"] = 'attachment; filename="FAF_Export_%d.xlsx"' % int(time.time() * 1000)
    return resp


@staff_member_required
def api_vat_report(request):
    """GET /api/admin/vat-report/?startDate=&endDate=&spaId=&taxCode="""
    try:
        filters = _filters_from(request.GET)
        tax_code = request.GET.get("taxCode") or None
        if tax_code and tax_code not in TAX_CODES:
            raise BadRequest(f"Invalid taxCode: {tax_code}")
    except BadRequest as e:
        return JsonResponse({"error": str(e)}, status=400)
    try:
        data = get_vat_return_report(filters.start_date, filters.end_date, filters.spa_id, tax_code)
    except ComplianceError as e:
        return JsonResponse({"error": "VAT report failed", "detail": str(e)}, status=500)
    return JsonResponse(data)


@csrf_exempt
@require_http_methods(["POST"])
@staff_member_required
def api_import_test_data(request):
    """
    POST /api/admin/test-data/import/ - raw JSON text (array or {"transactions": [...]}).
    Returns {success, imported, skipped, errors}.
    """
    content = request.body.decode("utf-8", errors="replace")
    result = import_from_json(content)
    logger.info(
        "Test data import by %s: success=%s imported=%s skipped=%s",
        request.user.get_username(),
        result.success,
        result.imported,
        result.skipped,
    )
    return JsonResponse(result.as_dict())


@staff_member_required
def api_sample_test_data(request):
    """GET /api/admin/test-data/sample/ - fixed sample transactions."""
    return JsonResponse({"transactions": generate_sample_test_data()})
