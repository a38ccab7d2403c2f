"""
FTA Audit File (FAF) export.

Normalizes the five revenue streams (bookings, product sales, loyalty cards,
invoices, payment transactions) into one date-descending ledger.
Read-only. Any stream failure aborts the whole export.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Model, Q
from django.utils import timezone

from compliance.exceptions import FAFExportError
from compliance.models import Booking, Invoice, LoyaltyCard, ProductSale, Transaction
from compliance.services.vat_calculator import VATCalculation, calculate_vat, round2

logger = logging.getLogger("compliance")

CSV_HEADERS = [
    "Transaction ID",
    "Date",
    "Type",
    "Customer ID",
    "Gross Amount (AED)",
    "Net Amount (AED)",
    "VAT Amount (AED)",
    "Tax Code",
    "Currency",
    "Description",
]


@dataclass
class FAFRecord:
    transaction_id: str
    transaction_date: str
    transaction_type: str
    customer_id: int
    gross_amount: str
    net_amount: str
    vat_amount: str
    tax_code: str
    currency: str
    description: str

    def as_dict(self) -> dict:
        return {
            "transactionId": self.transaction_id,
            "transactionDate": self.transaction_date,
            "transactionType": self.transaction_type,
            "customerId": self.customer_id,
            "grossAmount": self.gross_amount,
            "netAmount": self.net_amount,
            "vatAmount": self.vat_amount,
            "taxCode": self.tax_code,
            "currency": self.currency,
            "description": self.description,
        }


@dataclass
class FAFExportFilters:
    start_date: date | None = None
    end_date: date | None = None
    spa_id: int | None = None

    @classmethod
    def coerce(cls, filters) -> "FAFExportFilters":
        """Accept None, an instance, or a mapping with snake_case or camelCase keys."""
        if filters is None:
            return cls()
        if isinstance(filters, cls):
            return filters
        return cls(
            start_date=filters.get("start_date", filters.get("startDate")),
            end_date=filters.get("end_date", filters.get("endDate")),
            spa_id=filters.get("spa_id", filters.get("spaId")),
        )


def _money(value) -> str:
    if value is None:
        return "0.00"
    amount = round2(Decimal(value))
    # No "-0.00" in the audit file
    return str(abs(amount) if amount.is_zero() else amount)


def _iso_date(value: datetime) -> str:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.date().isoformat()


def _currency() -> str:
    return getattr(settings, "FTA_CURRENCY", "AED")


def _derived_record(prefix: str, pk, when: datetime, type_label: str, customer_id: int, gross, description: str) -> FAFRecord:
    # Streams without stored VAT columns are treated as standard-rated
    gross = Decimal(gross or 0)
    vat = calculate_vat(abs(gross), "SR")
    if gross < 0:
        # Refunds are stored negative; split the magnitude and keep the sign
        vat = VATCalculation(-vat.net_amount, -vat.vat_amount, -vat.total)
    return FAFRecord(
        transaction_id=f"{prefix}-{pk}",
        transaction_date=_iso_date(when),
        transaction_type=type_label,
        customer_id=customer_id,
        gross_amount=_money(vat.total),
        net_amount=_money(vat.net_amount),
        vat_amount=_money(vat.vat_amount),
        tax_code="SR",
        currency=_currency(),
        description=description,
    )


def _booking_record(booking: Booking) -> FAFRecord:
    return _derived_record(
        "BK", booking.pk, booking.booking_date, "Service Booking",
        booking.customer_id, booking.total_amount, "Spa service booking",
    )


def _product_sale_record(sale: ProductSale) -> FAFRecord:
    return FAFRecord(
        transaction_id=f"PS-{sale.pk}",
        transaction_date=_iso_date(sale.sale_date),
        transaction_type="Product Sale",
        customer_id=sale.customer_id,
        gross_amount=_money(sale.total_price),
        net_amount=_money(sale.net_amount),
        vat_amount=_money(sale.vat_amount),
        tax_code=sale.tax_code or "SR",
        currency=_currency(),
        description="Retail product sale",
    )


def _loyalty_card_record(card: LoyaltyCard) -> FAFRecord:
    return FAFRecord(
        transaction_id=f"LC-{card.pk}",
        transaction_date=_iso_date(card.purchase_date),
        transaction_type="Loyalty Card Purchase",
        customer_id=card.customer_id,
        gross_amount=_money(card.purchase_price),
        net_amount=_money(card.net_amount),
        vat_amount=_money(card.vat_amount),
        tax_code=card.tax_code or "SR",
        currency=_currency(),
        description=card.card_type or "Loyalty package",
    )


def _invoice_record(invoice: Invoice) -> FAFRecord:
    return _derived_record(
        "INV", invoice.pk, invoice.issue_date, "Invoice",
        invoice.customer_id, invoice.total_amount, f"Invoice {invoice.invoice_number}",
    )


def _transaction_record(txn: Transaction) -> FAFRecord:
    description = (txn.transaction_type or "payment").capitalize()
    if txn.payment_method:
        description = f"{description} ({txn.payment_method})"
    # No direct customer link on payments
    return _derived_record(
        "TXN", txn.pk, txn.transaction_date, "Payment Transaction",
        0, txn.amount, description,
    )


@dataclass(frozen=True)
class RevenueStream:
    """One source table: its date column, its join path to the spa, and its record mapping."""

    name: str
    model: type[Model]
    date_field: str
    spa_lookup: str
    build_record: Callable[[Model], FAFRecord]

    def predicates(self, filters: FAFExportFilters) -> list[Q]:
        preds = []
        preds.extend(_date_predicates(self.date_field, filters.start_date, filters.end_date))
        if filters.spa_id is not None:
            # Lookups across FKs become INNER JOINs, so rows without a path to a spa drop out
            preds.append(Q(**{self.spa_lookup: filters.spa_id}))
        return preds

    def queryset(self, filters: FAFExportFilters):
        qs = self.model.objects.all()
        for pred in self.predicates(filters):
            qs = qs.filter(pred)
        return qs.order_by(f"-{self.date_field}", "-pk")


def _date_predicates(field: str, start, end) -> list[Q]:
    """Datetime bounds compare directly; plain dates are inclusive calendar days."""
    preds = []
    if start is not None:
        if isinstance(start, datetime):
            preds.append(Q(**{f"{field}__gte": start}))
        else:
            preds.append(Q(**{f"{field}__date__gte": start}))
    if end is not None:
        if isinstance(end, datetime):
            preds.append(Q(**{f"{field}__lte": end}))
        else:
            preds.append(Q(**{f"{field}__date__lte": end}))
    return preds


REVENUE_STREAMS = (
    RevenueStream("bookings", Booking, "booking_date", "spa", _booking_record),
    RevenueStream("product_sales", ProductSale, "sale_date", "sold_by__spa", _product_sale_record),
    RevenueStream("loyalty_cards", LoyaltyCard, "purchase_date", "service__spa", _loyalty_card_record),
    RevenueStream("invoices", Invoice, "issue_date", "booking__spa", _invoice_record),
    RevenueStream("transactions", Transaction, "transaction_date", "invoice__booking__spa", _transaction_record),
)


def generate_faf_export(filters=None) -> list[FAFRecord]:
    """
    Build the audit ledger across all revenue streams, newest first.
    filters: FAFExportFilters or mapping with start_date/end_date/spa_id (camelCase accepted).
    Raises FAFExportError if any stream query fails.
    """
    filters = FAFExportFilters.coerce(filters)
    dated = []
    for stream in REVENUE_STREAMS:
        try:
            rows = list(stream.queryset(filters))
        except DatabaseError as e:
            logger.exception("FAF export: %s query failed", stream.name)
            raise FAFExportError(stream.name, str(e)) from e
        for row in rows:
            dated.append((getattr(row, stream.date_field), stream.build_record(row)))

    dated.sort(key=lambda item: item[0], reverse=True)
    records = [record for _, record in dated]
    logger.info(
        "FAF export generated: %s records",
        len(records),
        extra={"operation": "faf_export", "spa_id": filters.spa_id, "record_count": len(records)},
    )
    return records


def convert_faf_to_csv(records: list[FAFRecord]) -> str:
    """
    Render records as CSV. Only Description is quoted (embedded quotes doubled);
    rows are LF-joined in input order with no trailing newline.
    """
    lines = [",".join(CSV_HEADERS)]
    for r in records:
        description = r.description.replace('"', '""')
        lines.append(",".join([
            r.transaction_id,
            r.transaction_date,
            r.transaction_type,
            str(r.customer_id),
            r.gross_amount,
            r.net_amount,
            r.vat_amount,
            r.tax_code,
            r.currency,
            f'"{description}"',
        ]))
    return "\n".join(lines)
