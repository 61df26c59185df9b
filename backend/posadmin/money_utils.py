"""
Money helpers.

Amounts are held as integer cents in the database and travel over the wire
as decimal strings with exactly two fraction digits ("4.00"). Percentages
(tax rates) are decimal strings ("8.5") and never pass through float.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import ValidationError


# Maximum price: 9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999

CENT = Decimal("0.01")


def format_cents(cents: int | None) -> str | None:
    """Render integer cents as a 2dp decimal string."""
    if cents is None:
        return None
    return str((Decimal(cents) / 100).quantize(CENT))


def to_decimal(value, field: str) -> Decimal:
    """Coerce JSON input (string or number, never bool) into a Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        # go through repr so 4.1 stays 4.1 rather than 4.0999999...
        value = repr(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def parse_money_to_cents(value, field: str = "price") -> int:
    """
    Parse "4.00" / "4" / 4 / 4.5 into integer cents.

    Rejects more than two fraction digits rather than silently rounding.
    """
    amount = to_decimal(value, field)
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range")
    if amount != cents:
        raise ValidationError(f"{field} must have at most 2 decimal places")
    return int(cents * 100)


def round_cents(value: Decimal) -> int:
    """Round a (possibly fractional) cents amount half-up to whole cents."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_tax_cents(subtotal_cents: int, tax_rate: str | Decimal) -> int:
    """tax = round2(subtotal * rate / 100), computed in cents."""
    rate = tax_rate if isinstance(tax_rate, Decimal) else Decimal(str(tax_rate))
    return round_cents(Decimal(subtotal_cents) * rate / Decimal(100))


def normalize_tax_rate(value) -> str:
    """Validate a percentage in [0, 100] and return its canonical string."""
    rate = to_decimal(value, "tax_rate")
    if rate < 0 or rate > 100:
        raise ValidationError("Tax rate must be a valid number between 0 and 100")
    normalized = rate.normalize()
    # normalize() turns 10 into 1E+1
    if normalized == normalized.to_integral():
        normalized = normalized.quantize(Decimal("1"))
    return format(normalized, "f")
