"""Audit-ready Excel export of the FAF ledger. Read-only."""

from collections import OrderedDict
from decimal import Decimal
from io import BytesIO

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font

from compliance.services.faf_export import CSV_HEADERS, FAFRecord


def render_faf_excel(records: list[FAFRecord], period: str = "") -> bytes:
    """Workbook with the full ledger on "FAF" and per-stream totals on "Summary"."""
    wb = Workbook()

    ws = wb.active
    ws.title = "FAF"
    ws.append(CSV_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for r in records:
        ws.append([
            r.transaction_id,
            r.transaction_date,
            r.transaction_type,
            r.customer_id,
            float(r.gross_amount),
            float(r.net_amount),
            float(r.vat_amount),
            r.tax_code,
            r.currency,
            r.description,
        ])
    ws.freeze_panes = "A2"

    totals = OrderedDict()
    for r in records:
        row = totals.setdefault(r.transaction_type, [0, Decimal("0"), Decimal("0"), Decimal("0")])
        row[0] += 1
        row[1] += Decimal(r.gross_amount)
        row[2] += Decimal(r.net_amount)
        row[3] += Decimal(r.vat_amount)

    ws2 = wb.create_sheet("Summary")
    ws2.append(["FTA Audit File", period or "All time", timezone.now().isoformat()])
    ws2.append([])
    ws2.append(["Type", "Count", "Gross Amount (AED)", "Net Amount (AED)", "VAT Amount (AED)"])
    for type_label, (count, gross, net, vat) in totals.items():
        ws2.append([type_label, count, float(gross), float(net), float(vat)])

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
