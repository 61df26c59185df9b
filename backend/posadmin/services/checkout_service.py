"""
Checkout / Transaction Engine

Turns a client cart into one durable, consistent Transaction while
keeping every product's stock >= 0 under concurrent checkouts.

Flow (one database transaction):
1. Reject an empty cart.
2. Load the business and the referenced products (scoped to that business).
3. For each line, run the conditional decrement from catalog_service.
   The first line that cannot be covered aborts the whole checkout: the
   session is rolled back, which restores every decrement already applied
   in this attempt, and InsufficientStockError names the product.
4. Price every line from the catalog, compute subtotal/tax/total in
   integer cents with the business's tax rate.
5. Allocate a receipt number, insert the Transaction and its lines, commit.

Client-supplied totals are advisory. They are compared with the server's
figures and discarded; a mismatch is logged.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..errors import AppError, InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import PAYMENT_METHODS, PosBusiness, Product, Transaction, TransactionLine
from ..money_utils import compute_tax_cents, format_cents, parse_money_to_cents
from ..time_utils import utcnow
from ..validation import coerce_int, enforce_line_quantity
from . import receipt_service
from .catalog_service import decrement_stock
from .concurrency import run_with_retry

MAX_CART_LINES = 500


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int
    # Name the client displayed; only used to label errors for unknown ids
    client_name: str | None = None


@dataclass(frozen=True)
class Totals:
    subtotal_cents: int
    tax_cents: int
    total_cents: int

    def to_dict(self) -> dict:
        return {
            "subtotal": format_cents(self.subtotal_cents),
            "tax": format_cents(self.tax_cents),
            "total": format_cents(self.total_cents),
        }


def parse_cart(items) -> list[CartLine]:
    """
    Validate the submitted cart shape.

    Each item: {"product_id": int, "quantity": int > 0, "name"?: str}.
    Raises ValidationError("Order must contain at least one item") for an
    empty cart.
    """
    if items is None or (isinstance(items, list) and not items):
        raise ValidationError("Order must contain at least one item", details={"code": "empty_order"})
    if not isinstance(items, list):
        raise ValidationError("items must be a list")
    if len(items) > MAX_CART_LINES:
        raise ValidationError(f"Order cannot contain more than {MAX_CART_LINES} lines")

    lines: list[CartLine] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if "product_id" not in item:
            raise ValidationError(f"items[{index}].product_id is required")

        product_id = coerce_int(item["product_id"], f"items[{index}].product_id")
        quantity = coerce_int(item.get("quantity", 1), f"items[{index}].quantity")
        enforce_line_quantity(quantity)

        name = item.get("name")
        lines.append(CartLine(
            product_id=product_id,
            quantity=quantity,
            client_name=name.strip() if isinstance(name, str) and name.strip() else None,
        ))
    return lines


def compute_totals(priced_lines: list[tuple[int, int]], tax_rate: str) -> Totals:
    """
    priced_lines: (unit_price_cents, quantity) pairs.

    subtotal = sum(unit * qty); tax = round2(subtotal * rate / 100) half-up;
    total = subtotal + tax.
    """
    subtotal = sum(unit * qty for unit, qty in priced_lines)
    tax = compute_tax_cents(subtotal, tax_rate)
    return Totals(subtotal_cents=subtotal, tax_cents=tax, total_cents=subtotal + tax)


def _check_client_totals(pos_id: int, client_totals: dict | None, totals: Totals) -> None:
    if not client_totals:
        return
    server = {
        "subtotal": totals.subtotal_cents,
        "tax": totals.tax_cents,
        "total": totals.total_cents,
    }
    mismatched = []
    for key, server_cents in server.items():
        raw = client_totals.get(key)
        if raw is None:
            continue
        try:
            client_cents = parse_money_to_cents(raw, key)
        except ValidationError:
            mismatched.append(key)
            continue
        if client_cents != server_cents:
            mismatched.append(key)
    if mismatched:
        current_app.logger.warning(
            "Checkout for business %s: client totals disagree on %s; using server totals %s",
            pos_id, ", ".join(mismatched), totals.to_dict(),
        )


def _label_for(line: CartLine, product: Product | None) -> str:
    if product is not None:
        return product.name
    return line.client_name or f"#{line.product_id}"


def _checkout_locked(
    business: PosBusiness,
    lines: list[CartLine],
    payment_method: str,
    client_totals: dict | None,
) -> Transaction:
    product_ids = {line.product_id for line in lines}
    products = {
        p.id: p
        for p in db.session.query(Product)
        .filter(Product.pos_id == business.id, Product.id.in_(product_ids))
        .all()
    }

    # Unknown or foreign product ids fail the whole order up front
    for line in lines:
        if line.product_id not in products:
            raise InsufficientStockError(_label_for(line, None), product_id=line.product_id)

    # Snapshot name/price before the UPDATEs; the decrement never touches them
    snapshot = {pid: (p.name, p.price_cents) for pid, p in products.items()}

    for line in lines:
        if not decrement_stock(line.product_id, business.id, line.quantity):
            raise InsufficientStockError(
                _label_for(line, products[line.product_id]), product_id=line.product_id
            )

    priced = [(snapshot[line.product_id][1], line.quantity) for line in lines]
    totals = compute_totals(priced, business.tax_rate)
    _check_client_totals(business.id, client_totals, totals)

    transaction = Transaction(
        pos_id=business.id,
        receipt_number=receipt_service.next_receipt_number(business.id),
        subtotal_cents=totals.subtotal_cents,
        tax_cents=totals.tax_cents,
        total_cents=totals.total_cents,
        tax_rate=business.tax_rate,
        payment_method=payment_method,
        created_at=utcnow(),
    )
    for number, line in enumerate(lines, start=1):
        name, unit_price_cents = snapshot[line.product_id]
        transaction.lines.append(TransactionLine(
            line_number=number,
            product_id=line.product_id,
            name=name,
            unit_price_cents=unit_price_cents,
            quantity=line.quantity,
        ))

    db.session.add(transaction)
    return transaction


def checkout(
    pos_id: int,
    items,
    payment_method: str,
    client_totals: dict | None = None,
) -> Transaction:
    """
    Complete a sale for `pos_id`. All-or-nothing.

    Raises:
        ValidationError: empty cart, malformed line, unknown payment method
        NotFoundError: business does not exist
        InsufficientStockError: a line cannot be covered, or references a
            product this business does not sell; nothing is changed
    """
    lines = parse_cart(items)
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")

    def _op() -> Transaction:
        business = db.session.get(PosBusiness, pos_id)
        if business is None:
            raise NotFoundError("POS business not found")
        try:
            transaction = _checkout_locked(business, lines, payment_method, client_totals)
            db.session.commit()
        except AppError as exc:
            db.session.rollback()
            if isinstance(exc, InsufficientStockError):
                current_app.logger.warning(
                    "Checkout for business %s rejected: %s", pos_id, exc.message
                )
            raise
        return transaction

    transaction = run_with_retry(_op)
    current_app.logger.info(
        "Checkout %s for business %s: %d lines, total %s",
        transaction.receipt_number, pos_id, len(lines), format_cents(transaction.total_cents),
    )
    return transaction


def list_transactions(pos_id: int, limit: int | None = None) -> list[Transaction]:
    query = (
        db.session.query(Transaction)
        .filter(Transaction.pos_id == pos_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_transaction(transaction_id: int, pos_id: int) -> Transaction:
    """Load a transaction owned by `pos_id`; foreign ids look like missing ones."""
    transaction = db.session.get(Transaction, transaction_id)
    if transaction is None or transaction.pos_id != pos_id:
        raise NotFoundError("Transaction not found")
    return transaction
