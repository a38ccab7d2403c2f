"""
VAT return report. Per-stream breakdown (services, products, loyalty) over FAF records.
Invoices and payment transactions settle the same supplies and are not counted again.
"""

from decimal import Decimal

from compliance.services.faf_export import FAFExportFilters, generate_faf_export
from compliance.services.vat_calculator import TAX_CODES

REPORT_STREAMS = {
    "BK": "services",
    "PS": "products",
    "LC": "loyalty",
}


def _empty_totals() -> dict:
    return {"count": 0, "net": Decimal("0"), "vat": Decimal("0"), "gross": Decimal("0")}


def _as_json(totals: dict) -> dict:
    return {
        "count": totals["count"],
        "netAmount": float(totals["net"]),
        "vatAmount": float(totals["vat"]),
        "grossAmount": float(totals["gross"]),
    }


def _add(totals: dict, record) -> None:
    totals["count"] += 1
    totals["net"] += Decimal(record.net_amount)
    totals["vat"] += Decimal(record.vat_amount)
    totals["gross"] += Decimal(record.gross_amount)


def get_vat_return_report(start_date=None, end_date=None, spa_id=None, tax_code: str | None = None) -> dict:
    """
    Aggregate VAT for the period. tax_code narrows every stream; byTaxCode is only
    filled when no tax_code is given.
    """
    records = generate_faf_export(FAFExportFilters(start_date, end_date, spa_id))

    streams = {name: _empty_totals() for name in REPORT_STREAMS.values()}
    by_code = {code: _empty_totals() for code in TAX_CODES}
    for record in records:
        stream = REPORT_STREAMS.get(record.transaction_id.split("-", 1)[0])
        if stream is None:
            continue
        if tax_code and record.tax_code != tax_code:
            continue
        _add(streams[stream], record)
        if record.tax_code in by_code:
            _add(by_code[record.tax_code], record)

    overall = _empty_totals()
    for totals in streams.values():
        for key in overall:
            overall[key] += totals[key]

    return {
        "period": {
            "from": start_date.isoformat()[:10] if start_date else "All time",
            "to": end_date.isoformat()[:10] if end_date else "All time",
        },
        "totals": {
            **{name: _as_json(totals) for name, totals in streams.items()},
            "overall": {
                "totalCount": overall["count"],
                "totalNet": float(overall["net"]),
                "totalVAT": float(overall["vat"]),
                "totalGross": float(overall["gross"]),
            },
        },
        "byTaxCode": [] if tax_code else [
            {"taxCode": code, **_as_json(totals)} for code, totals in by_code.items()
        ],
    }
