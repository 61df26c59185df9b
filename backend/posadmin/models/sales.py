from __future__ import annotations

from ..extensions import db
from ..money_utils import format_cents
from ..time_utils import to_utc_z, utcnow

PAYMENT_METHODS = ("cash", "card")


class Transaction(db.Model):
    """
    Completed checkout. Append-only: never updated or deleted except by the
    cascade that removes its owning business.

    Invariants (enforced by checkout_service at creation):
    - subtotal_cents == sum(line.unit_price_cents * line.quantity)
    - total_cents == subtotal_cents + tax_cents
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.UniqueConstraint("pos_id", "receipt_number", name="uq_transactions_pos_receipt"),
        db.Index("ix_transactions_pos_created", "pos_id", "created_at"),
        db.CheckConstraint("payment_method IN ('cash', 'card')", name="ck_transactions_payment_method"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    pos_id = db.Column(
        db.Integer,
        db.ForeignKey("pos_businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receipt_number = db.Column(db.String(32), nullable=False)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)
    tax_rate = db.Column(db.String(16), nullable=False)

    payment_method = db.Column(db.String(8), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    business = db.relationship("PosBusiness", back_populates="transactions")
    lines = db.relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.line_number",
        lazy="selectin",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pos_id": self.pos_id,
            "receipt_number": self.receipt_number,
            "items": [line.to_dict() for line in self.lines],
            "subtotal": format_cents(self.subtotal_cents),
            "tax": format_cents(self.tax_cents),
            "total": format_cents(self.total_cents),
            "tax_rate": self.tax_rate,
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }


class TransactionLine(db.Model):
    """
    Snapshot of one cart line at checkout time.

    product_id is deliberately not a foreign key: products can be deleted
    later while the sale record must stay intact.
    """
    __tablename__ = "transaction_lines"
    __table_args__ = (
        db.UniqueConstraint("transaction_id", "line_number", name="uq_transaction_lines_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(
        db.Integer,
        db.ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_number = db.Column(db.Integer, nullable=False)

    product_id = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    transaction = db.relationship("Transaction", back_populates="lines")

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": format_cents(self.unit_price_cents),
            "quantity": self.quantity,
            "line_total": format_cents(self.line_total_cents),
        }


class ReceiptSequence(db.Model):
    """Per-business counter backing receipt numbers (R-000001, R-000002, ...)."""
    __tablename__ = "receipt_sequences"

    pos_id = db.Column(
        db.Integer,
        db.ForeignKey("pos_businesses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    next_number = db.Column(db.Integer, nullable=False, default=1)
