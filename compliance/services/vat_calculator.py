"""
UAE VAT arithmetic. 5% standard rate, tax-inclusive pricing.
Tax codes: SR (Standard Rate 5%), ZR (Zero-Rated 0%), ES (Exempt), OP (Out of Scope).

Inclusive: net = gross / (1 + rate), vat = gross - net
Exclusive: vat = net × rate, total = net + vat
All figures quantized to 0.01 with ROUND_HALF_UP.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from types import MappingProxyType

from compliance.exceptions import VATCalculationError

UAE_VAT_RATE = Decimal("0.05")

TAX_CODES = MappingProxyType({
    "SR": MappingProxyType({"code": "SR", "name": "Standard Rate (5%)", "rate": UAE_VAT_RATE}),
    "ZR": MappingProxyType({"code": "ZR", "name": "Zero-Rated (0%)", "rate": Decimal("0")}),
    "ES": MappingProxyType({"code": "ES", "name": "Exempt", "rate": Decimal("0")}),
    "OP": MappingProxyType({"code": "OP", "name": "Out of Scope", "rate": Decimal("0")}),
})

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class VATCalculation:
    net_amount: Decimal
    vat_amount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "netAmount": float(self.net_amount),
            "vatAmount": float(self.vat_amount),
            "total": float(self.total),
        }


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_amount(value, field: str = "amount") -> Decimal:
    """
    Coerce a money value to Decimal. Rejects bools, non-numbers, NaN/Infinity and negatives.
    Floats go through str() so 0.1 stays 0.1.
    """
    if isinstance(value, bool) or value is None:
        raise VATCalculationError(f"Invalid {field}: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise VATCalculationError(f"Invalid {field}: {value!r}") from None
    else:
        raise VATCalculationError(f"Invalid {field}: {value!r}")
    if not amount.is_finite():
        raise VATCalculationError(f"Invalid {field}: {value!r}")
    if amount < 0:
        raise VATCalculationError(f"{field.capitalize()} must not be negative: {value}")
    return amount


def get_rate(tax_code: str) -> Decimal:
    try:
        return TAX_CODES[tax_code]["rate"]
    except (KeyError, TypeError):
        raise VATCalculationError(
            f"Invalid tax code: {tax_code}. Must be SR, ZR, ES, or OP"
        ) from None


def calculate_vat(inclusive_amount, tax_code: str = "SR") -> VATCalculation:
    """
    Split a VAT-inclusive (gross) amount into net and VAT.

    calculate_vat(105, "SR") -> net 100.00, vat 5.00, total 105.00
    """
    rate = get_rate(tax_code)
    gross = to_amount(inclusive_amount, "inclusive amount")
    if rate == 0:
        return VATCalculation(round2(gross), Decimal("0.00"), round2(gross))
    net = gross / (1 + rate)
    vat = gross - net
    return VATCalculation(round2(net), round2(vat), round2(gross))


def calculate_vat_from_net(exclusive_amount, tax_code: str = "SR") -> VATCalculation:
    """
    Add VAT on top of a VAT-exclusive (net) amount.

    calculate_vat_from_net(100, "SR") -> net 100.00, vat 5.00, total 105.00
    """
    rate = get_rate(tax_code)
    net = to_amount(exclusive_amount, "exclusive amount")
    if rate == 0:
        return VATCalculation(round2(net), Decimal("0.00"), round2(net))
    vat = net * rate
    return VATCalculation(round2(net), round2(vat), round2(net + vat))


def calculate_vat_with_discount(gross_amount, discount_amount, tax_code: str = "SR") -> VATCalculation:
    """Apply a flat discount to the inclusive price, then split VAT on what remains."""
    gross = to_amount(gross_amount, "gross amount")
    discount = to_amount(discount_amount, "discount amount")
    if discount > gross:
        raise VATCalculationError(f"Discount {discount} exceeds gross amount {gross}")
    return calculate_vat(gross - discount, tax_code)
