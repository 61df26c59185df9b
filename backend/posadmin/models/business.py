from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

BUSINESS_STATUSES = ("pending", "approved", "rejected")


class PosBusiness(db.Model):
    """
    Tenant root: one merchant operating one point of sale.

    Lifecycle is driven by admins (pending -> approved/rejected, with
    revocation and re-approval). Only an approved business can sign in.
    Deleting a business removes its products, transactions and receipt
    sequence through the ORM cascades below.
    """
    __tablename__ = "pos_businesses"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_pos_businesses_status",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    contact_email = db.Column(db.String(255), nullable=False)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    # Receipt / register configuration, editable by the business once approved
    currency_symbol = db.Column(db.String(8), nullable=False, default="$")
    business_address = db.Column(db.String(255), nullable=True)
    business_phone = db.Column(db.String(64), nullable=True)
    receipt_footer = db.Column(db.Text, nullable=True)
    # Percentage kept as a decimal string ("8.5") to avoid float drift
    tax_rate = db.Column(db.String(16), nullable=False, default="8.5")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    approved_at = db.Column(db.DateTime, nullable=True)
    approved_by_admin_id = db.Column(db.Integer, db.ForeignKey("admin_users.id"), nullable=True)

    products = db.relationship(
        "Product",
        back_populates="business",
        cascade="all, delete-orphan",
        lazy=True,
    )
    transactions = db.relationship(
        "Transaction",
        back_populates="business",
        cascade="all, delete-orphan",
        lazy=True,
    )
    receipt_sequence = db.relationship(
        "ReceiptSequence",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<PosBusiness id={self.id} name={self.business_name!r} status={self.status}>"

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    def to_dict(self) -> dict:
        """Full view for the owning business and for admins. Never includes the password hash."""
        return {
            "id": self.id,
            "business_name": self.business_name,
            "contact_email": self.contact_email,
            "username": self.username,
            "status": self.status,
            "currency_symbol": self.currency_symbol,
            "business_address": self.business_address,
            "business_phone": self.business_phone,
            "receipt_footer": self.receipt_footer,
            "tax_rate": self.tax_rate,
            "created_at": to_utc_z(self.created_at),
            "approved_at": to_utc_z(self.approved_at),
            "approved_by_admin_id": self.approved_by_admin_id,
        }

    def to_public_dict(self) -> dict:
        """Anonymous view used by the register picker on the login screen."""
        return {
            "id": self.id,
            "business_name": self.business_name,
            "username": self.username,
            "status": self.status,
            "currency_symbol": self.currency_symbol,
        }
