"""
Business self-service settings (currency and receipt/business information).

Only the business itself reaches these (routes are POS-guarded, and the
guard only admits approved businesses).
"""

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import PosBusiness
from ..money_utils import normalize_tax_rate
from .approval_service import get_business

MAX_CURRENCY_SYMBOL_LENGTH = 8

# request key -> (column, max length)
BUSINESS_INFO_FIELDS = {
    "business_name": ("business_name", 255),
    "business_address": ("business_address", 255),
    "business_phone": ("business_phone", 64),
    "receipt_footer": ("receipt_footer", 2000),
}


def update_currency(pos_id: int, currency_symbol) -> PosBusiness:
    if not isinstance(currency_symbol, str) or not currency_symbol.strip():
        raise ValidationError("Currency symbol is required")
    symbol = currency_symbol.strip()
    if len(symbol) > MAX_CURRENCY_SYMBOL_LENGTH:
        raise ValidationError(f"Currency symbol exceeds max length {MAX_CURRENCY_SYMBOL_LENGTH}")

    business = get_business(pos_id)
    business.currency_symbol = symbol
    db.session.commit()
    return business


def update_business_info(pos_id: int, payload: dict) -> PosBusiness:
    """
    Partial update of receipt header/footer fields and tax rate.

    Blank text values are ignored (the stored value is kept). tax_rate must
    be a number in [0, 100]; it is stored as a normalized decimal string.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    updates: dict = {}
    for key, (column, max_length) in BUSINESS_INFO_FIELDS.items():
        raw = payload.get(key)
        if raw is None:
            continue
        if not isinstance(raw, str):
            raise ValidationError(f"{key} must be a string")
        value = raw.strip()
        if not value:
            continue
        if len(value) > max_length:
            raise ValidationError(f"{key} exceeds max length {max_length}")
        updates[column] = value

    if payload.get("tax_rate") is not None:
        updates["tax_rate"] = normalize_tax_rate(payload["tax_rate"])

    business = get_business(pos_id)
    for column, value in updates.items():
        setattr(business, column, value)
    if updates:
        db.session.commit()
    return business
