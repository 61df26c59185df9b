"""
Payload validation against model column metadata.

Catalog writes arrive as loose JSON. Each field is checked against a policy
allowlist, coerced according to its SQLAlchemy column type, and then checked
for nullability and String(n) length. Rules the schema cannot express
(price and stock ranges, line quantities) live in the enforce_* helpers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text

from .errors import ValidationError
from .money_utils import MAX_PRICE_CENTS

# Upper bound for a single stock level or line quantity
MAX_QUANTITY = 1_000_000

_TRUE_FALSE = {"true": True, "false": False}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    writable_fields: keys a client may send (anything else is refused)
    required_on_create: keys that must be present when partial=False
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()


def coerce_int(value: Any, field: str) -> int:
    """Strict integer coercion: rejects bools, floats, decimals and scientific notation."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be an integer")

    text = value.strip()
    if "e" in text.lower():
        raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
    if "." in text:
        raise ValidationError(f"{field} must be an integer (no decimals)")
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{field} must be an integer")


def _coerce(column, value: Any):
    kind = column.type

    if isinstance(kind, Integer):
        return coerce_int(value, column.key)

    if isinstance(kind, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_FALSE:
            return _TRUE_FALSE[value.strip().lower()]
        raise ValidationError(f"{column.key} must be a boolean")

    if isinstance(kind, (String, Text)):
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValidationError(f"{column.key} must be a string")
        text = str(value).strip()
        if text == "" and not column.nullable:
            raise ValidationError(f"{column.key} cannot be blank")
        limit = getattr(kind, "length", None)
        if limit and len(text) > limit:
            raise ValidationError(f"{column.key} exceeds max length {limit}")
        return text

    return value


def validate_payload(*, model, payload: dict, policy: ModelValidationPolicy, partial: bool) -> dict:
    """
    Return a cleaned patch holding only writable, type-coerced fields.

    partial=False enforces policy.required_on_create (create);
    partial=True validates only the keys present (update).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create.difference(payload))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}

    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        column = columns.get(key)
        if column is None:
            raise ValidationError(f"Unknown field: {key}")

        if raw is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _coerce(column, raw)

    return patch


def enforce_rules_product(patch: dict) -> None:
    """Price and stock ranges for a product patch."""
    price = patch.get("price_cents")
    if price is not None:
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"price cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")

    if patch.get("stock") is not None:
        enforce_stock_level(patch["stock"])


def enforce_stock_level(stock: int) -> None:
    if stock < 0:
        raise ValidationError("stock must be >= 0")
    if stock > MAX_QUANTITY:
        raise ValidationError(f"stock cannot exceed {MAX_QUANTITY}")


def enforce_line_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY}")
