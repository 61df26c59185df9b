# backend/posadmin/services/catalog_service.py
"""
Catalog Service

TENANCY: Every product belongs to one POS business (pos_id). Every mutation
re-checks ownership against the caller's pos_id here, at the service
boundary, never relying on an earlier read in the route.

STOCK: Two ways to change stock and only two:
- set_stock / update: owner-authorized overwrite (manual inventory correction)
- decrement_stock: checkout's single conditional UPDATE
There is no read-modify-write of stock anywhere in application code.
"""
from __future__ import annotations

from sqlalchemy import update

from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product
from ..money_utils import parse_money_to_cents
from ..validation import (
    ModelValidationPolicy,
    coerce_int,
    enforce_rules_product,
    enforce_stock_level,
    validate_payload,
)

DEFAULT_CATEGORY = "general"

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "price_cents", "category", "stock", "image_url", "is_active"}),
    required_on_create=frozenset({"name"}),
)


def _normalize_payload(payload: dict | None) -> dict:
    """Map the wire shape ("price": "4.00") onto column names (price_cents)."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    normalized = dict(payload)
    if "price_cents" in normalized:
        raise ValidationError("Field not allowed: price_cents")
    if "price" in normalized:
        raw = normalized.pop("price")
        normalized["price_cents"] = None if raw is None else parse_money_to_cents(raw, "price")
    return normalized


def _validated_patch(payload: dict | None, *, partial: bool) -> dict:
    patch = validate_payload(
        model=Product,
        payload=_normalize_payload(payload),
        policy=PRODUCT_POLICY,
        partial=partial,
    )
    enforce_rules_product(patch)
    return patch


def list_active(pos_id: int) -> list[Product]:
    """Active products of one business, alphabetical."""
    return (
        db.session.query(Product)
        .filter(Product.pos_id == pos_id, Product.is_active.is_(True))
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )


def list_products(pos_id: int, include_inactive: bool = False) -> list[Product]:
    if not include_inactive:
        return list_active(pos_id)
    return (
        db.session.query(Product)
        .filter(Product.pos_id == pos_id)
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )


def get_owned_product(product_id: int, pos_id: int) -> Product:
    """
    Load a product and assert the caller owns it.

    Raises:
        NotFoundError: no such product
        AuthorizationError: product belongs to another business
    """
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.pos_id != pos_id:
        raise AuthorizationError("Product belongs to another business")
    return product


def create_product(pos_id: int, payload: dict) -> Product:
    """
    Create a product for `pos_id`.

    Required: name, price. Optional: category (defaults to "general" when
    missing or blank), stock (defaults to 0), image_url, is_active.
    """
    payload = dict(payload or {})
    category = payload.get("category")
    if category is None or (isinstance(category, str) and not category.strip()):
        payload["category"] = DEFAULT_CATEGORY

    if payload.get("price") is None and "price_cents" not in payload:
        raise ValidationError("price is required")

    patch = _validated_patch(payload, partial=False)
    patch.setdefault("stock", 0)

    product = Product(pos_id=pos_id, **patch)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, pos_id: int, payload: dict) -> Product:
    """Apply a partial update after the ownership check."""
    product = get_owned_product(product_id, pos_id)

    payload = dict(payload or {})
    if "category" in payload and isinstance(payload["category"], str) and not payload["category"].strip():
        payload["category"] = DEFAULT_CATEGORY

    patch = _validated_patch(payload, partial=True)
    for key, value in patch.items():
        setattr(product, key, value)

    db.session.commit()
    return product


def delete_product(product_id: int, pos_id: int) -> bool:
    """
    Hard-delete a product. Returns False when the id does not exist.

    Historical transaction lines keep their own name/price snapshot.
    """
    product = db.session.get(Product, product_id)
    if product is None:
        return False
    if product.pos_id != pos_id:
        raise AuthorizationError("Product belongs to another business")

    db.session.delete(product)
    db.session.commit()
    return True


def set_stock(product_id: int, pos_id: int, new_stock) -> Product:
    """Overwrite stock for manual inventory correction."""
    stock = coerce_int(new_stock, "stock")
    enforce_stock_level(stock)

    product = get_owned_product(product_id, pos_id)
    product.stock = stock
    db.session.commit()
    return product


def decrement_stock(product_id: int, pos_id: int, quantity: int) -> bool:
    """
    Atomic conditional decrement: stock -= quantity only if stock >= quantity.

    One UPDATE statement; the database evaluates the guard and applies the
    change indivisibly, so concurrent checkouts cannot both take the last
    unit. Only active products of `pos_id` qualify.

    Returns True if the row was decremented. Does not commit.
    """
    stmt = (
        update(Product)
        .where(
            Product.id == product_id,
            Product.pos_id == pos_id,
            Product.is_active.is_(True),
            Product.stock >= quantity,
        )
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    return result.rowcount == 1
