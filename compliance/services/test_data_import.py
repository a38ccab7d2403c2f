"""
FTA certification test data import.

Validates externally supplied sample transactions, computes VAT and persists each one
into its revenue-stream table. A bad entry is skipped and reported; the batch goes on.
Each insert commits on its own, so rows before a failure stay committed.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from compliance.models import Customer, Invoice, LoyaltyCard, Product, ProductSale, Service, Staff, Transaction
from compliance.services.vat_calculator import TAX_CODES, VATCalculation, calculate_vat, round2, to_amount

logger = logging.getLogger("compliance")


@dataclass
class TestDataImportResult:
    __test__ = False

    success: bool = True
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


class EntrySkipped(Exception):
    """Entry is well-formed but cannot be persisted (missing linkage)."""


def _default_notes() -> str:
    return getattr(settings, "FTA_TEST_DATA_NOTES", "FTA Test Data")


WHOLE_NUMBER_FIELDS = ("quantity", "sessionsIncluded", "sessionsRemaining")


def _is_whole_number(value) -> bool:
    """Non-negative integer, or a float with no fractional part (2.0)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer() and value >= 0
    return isinstance(value, int) and value >= 0


def _int_or(value, default: int) -> int:
    # Falsy values (None, 0, "") fall back to the default
    return int(value) if value else default


def parse_entry_date(value) -> datetime | None:
    """Parse an ISO date or datetime. Returns an aware datetime, or None if not a real date."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            return None
    else:
        return None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def validate_test_data_entry(entry) -> tuple[bool, list[str]]:
    """
    Check required fields, amount, tax code and date. Returns (valid, errors);
    every problem is reported, not just the first.
    """
    if not isinstance(entry, dict):
        return False, ["Entry must be a JSON object"]

    errors = []
    if not entry.get("type"):
        errors.append("Missing transaction type")
    elif not isinstance(entry["type"], str):
        errors.append(f"Invalid transaction type: {entry['type']!r}")
    if not entry.get("date"):
        errors.append("Missing date")

    amount = entry.get("amount")
    if amount is None:
        errors.append("Missing amount")
    elif isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        errors.append("Invalid amount - must be a number")
    elif isinstance(amount, float) and not math.isfinite(amount):
        errors.append("Invalid amount - must be a number")
    elif amount < 0:
        errors.append("Amount must be positive")

    tax_code = entry.get("taxCode")
    if tax_code and (not isinstance(tax_code, str) or tax_code not in TAX_CODES):
        errors.append(f"Invalid tax code: {tax_code}. Must be SR, ZR, ES, or OP")

    if entry.get("date") and parse_entry_date(entry["date"]) is None:
        errors.append(f"Invalid date format: {entry['date']}")

    for name in WHOLE_NUMBER_FIELDS:
        value = entry.get(name)
        if value is None:
            continue
        if not _is_whole_number(value):
            errors.append(f"Invalid {name} - must be a whole number")

    return not errors, errors


@dataclass
class ProductSaleEntry:
    date: datetime
    amount: Decimal
    tax_code: str
    customer_id: int = 1
    product_id: int = 1
    quantity: int = 1
    sold_by: int = 1
    notes: str = ""

    @classmethod
    def from_raw(cls, raw: dict, date: datetime, amount: Decimal, tax_code: str) -> "ProductSaleEntry":
        return cls(
            date=date,
            amount=amount,
            tax_code=tax_code,
            customer_id=_int_or(raw.get("customerId"), 1),
            product_id=_int_or(raw.get("productId"), 1),
            quantity=_int_or(raw.get("quantity"), 1),
            sold_by=_int_or(raw.get("soldBy"), 1),
            notes=raw.get("notes") or _default_notes(),
        )

    def persist(self, vat: VATCalculation) -> ProductSale:
        return ProductSale.objects.create(
            customer=Customer.objects.get(pk=self.customer_id),
            product=Product.objects.get(pk=self.product_id),
            sold_by=Staff.objects.get(pk=self.sold_by),
            quantity=self.quantity,
            unit_price=round2(self.amount / self.quantity),
            total_price=round2(self.amount),
            net_amount=vat.net_amount,
            vat_amount=vat.vat_amount,
            tax_code=self.tax_code,
            sale_date=self.date,
            notes=self.notes,
        )


@dataclass
class LoyaltyCardEntry:
    date: datetime
    amount: Decimal
    tax_code: str
    customer_id: int = 1
    service_id: int = 1
    card_type: str = "Test Package"
    sessions_included: int = 10
    sessions_remaining: int = 10
    expiry_date: datetime | None = None
    notes: str = ""

    @classmethod
    def from_raw(cls, raw: dict, date: datetime, amount: Decimal, tax_code: str) -> "LoyaltyCardEntry":
        return cls(
            date=date,
            amount=amount,
            tax_code=tax_code,
            customer_id=_int_or(raw.get("customerId"), 1),
            service_id=_int_or(raw.get("serviceId"), 1),
            card_type=raw.get("cardType") or "Test Package",
            sessions_included=_int_or(raw.get("sessionsIncluded"), 10),
            sessions_remaining=_int_or(raw.get("sessionsRemaining"), 10),
            expiry_date=parse_entry_date(raw["expiryDate"]) if raw.get("expiryDate") else None,
            notes=raw.get("notes") or _default_notes(),
        )

    def persist(self, vat: VATCalculation) -> LoyaltyCard:
        return LoyaltyCard.objects.create(
            customer=Customer.objects.get(pk=self.customer_id),
            service=Service.objects.get(pk=self.service_id),
            card_type=self.card_type,
            purchase_price=round2(self.amount),
            net_amount=vat.net_amount,
            vat_amount=vat.vat_amount,
            tax_code=self.tax_code,
            sessions_included=self.sessions_included,
            sessions_remaining=self.sessions_remaining,
            purchase_date=self.date,
            expiry_date=self.expiry_date,
            notes=self.notes,
        )


@dataclass
class TransactionEntry:
    date: datetime
    amount: Decimal
    tax_code: str
    invoice_id: int
    transaction_type: str = "payment"
    payment_method: str = "cash"
    notes: str = ""

    @classmethod
    def from_raw(cls, raw: dict, date: datetime, amount: Decimal, tax_code: str) -> "TransactionEntry":
        # A payment with no invoice has nothing to settle
        if not raw.get("invoiceId"):
            raise EntrySkipped("Transaction requires invoiceId")
        return cls(
            date=date,
            amount=amount,
            tax_code=tax_code,
            invoice_id=int(raw["invoiceId"]),
            transaction_type=raw.get("transactionType") or "payment",
            payment_method=raw.get("paymentMethod") or "cash",
            notes=raw.get("notes") or _default_notes(),
        )

    def persist(self, vat: VATCalculation) -> Transaction:
        return Transaction.objects.create(
            invoice=Invoice.objects.get(pk=self.invoice_id),
            transaction_type=self.transaction_type,
            amount=round2(self.amount),
            transaction_date=self.date,
            payment_method=self.payment_method,
            notes=self.notes,
        )


ENTRY_TYPES = {
    "product_sale": ProductSaleEntry,
    "loyalty_card": LoyaltyCardEntry,
    "transaction": TransactionEntry,
}


def import_fta_test_data(test_data: list) -> TestDataImportResult:
    """
    Import entries one at a time, in order. Errors appear in input order.
    Validation and linkage problems skip the entry; a persistence failure also
    marks the whole result unsuccessful.
    """
    if not isinstance(test_data, (list, tuple)):
        return TestDataImportResult(success=False, errors=["Test data must be a list of transactions"])

    result = TestDataImportResult()
    default_tax_code = getattr(settings, "FTA_DEFAULT_TAX_CODE", "SR")

    for entry in test_data:
        try:
            valid, errors = validate_test_data_entry(entry)
            if not valid:
                result.skipped += 1
                result.errors.append(f"Skipped entry: {', '.join(errors)}")
                continue

            tax_code = entry.get("taxCode") or default_tax_code
            amount = to_amount(entry["amount"])
            vat = calculate_vat(amount, tax_code)

            entry_cls = ENTRY_TYPES.get(entry["type"])
            if entry_cls is None:
                result.skipped += 1
                result.errors.append(f"Unsupported transaction type: {entry['type']}")
                continue

            try:
                typed = entry_cls.from_raw(entry, parse_entry_date(entry["date"]), amount, tax_code)
            except EntrySkipped as e:
                result.skipped += 1
                result.errors.append(str(e))
                continue

            with transaction.atomic():
                typed.persist(vat)
            result.imported += 1
        except Exception as e:
            logger.warning("FTA test data entry failed: %s", e)
            result.errors.append(f"Failed to import entry: {e}")
            result.skipped += 1
            result.success = False

    logger.info(
        "FTA test data import: imported=%s skipped=%s",
        result.imported,
        result.skipped,
        extra={"operation": "fta_test_data_import", "imported": result.imported, "skipped": result.skipped},
    )
    return result


def import_from_json(json_content: str) -> TestDataImportResult:
    """Import from raw JSON text: a list of transactions or {"transactions": [...]}."""
    try:
        data = json.loads(json_content)
    except (TypeError, ValueError, RecursionError) as e:
        return _rejected(f"Failed to parse JSON: {e}")

    if isinstance(data, dict):
        entries = data.get("transactions", [])
    else:
        entries = data
    if not isinstance(entries, list):
        return _rejected("Failed to parse JSON: transactions must be an array")
    return import_fta_test_data(entries)


def _rejected(message: str) -> TestDataImportResult:
    logger.warning("FTA test data JSON rejected: %s", message)
    return TestDataImportResult(success=False, imported=0, skipped=0, errors=[message])


def generate_sample_test_data() -> list[dict]:
    """Three illustrative entries for smoke-testing the pipeline."""
    now = timezone.now().isoformat()
    return [
        {
            "type": "product_sale",
            "date": now,
            "amount": 105.00,  # 100 net + 5 VAT
            "taxCode": "SR",
            "customerId": 1,
            "productId": 1,
            "quantity": 1,
            "soldBy": 1,
            "notes": "Sample product sale with standard rated VAT",
        },
        {
            "type": "loyalty_card",
            "date": now,
            "amount": 525.00,  # 500 net + 25 VAT
            "taxCode": "SR",
            "customerId": 1,
            "serviceId": 1,
            "cardType": "10 Session Package",
            "sessionsIncluded": 10,
            "sessionsRemaining": 10,
            "notes": "Sample loyalty card purchase",
        },
        {
            "type": "product_sale",
            "date": now,
            "amount": 50.00,  # zero-rated, no VAT
            "taxCode": "ZR",
            "customerId": 1,
            "productId": 2,
            "quantity": 1,
            "soldBy": 1,
            "notes": "Zero-rated product sale",
        },
    ]
