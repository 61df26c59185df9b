from __future__ import annotations

from ..extensions import db
from ..money_utils import format_cents


class Product(db.Model):
    """
    Catalog item owned by exactly one POS business.

    `stock` is the only contended column. Checkout changes it exclusively
    through a conditional UPDATE (see catalog_service.decrement_stock);
    the CHECK constraint is the last line of defence for stock >= 0.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("price_cents >= 0", name="ck_products_price_non_negative"),
        db.Index("ix_products_pos_active", "pos_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    pos_id = db.Column(
        db.Integer,
        db.ForeignKey("pos_businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(64), nullable=False, default="general")
    stock = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(1024), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    business = db.relationship("PosBusiness", back_populates="products")

    def __repr__(self) -> str:
        return f"<Product id={self.id} pos_id={self.pos_id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pos_id": self.pos_id,
            "name": self.name,
            "price": format_cents(self.price_cents),
            "category": self.category,
            "stock": self.stock,
            "image_url": self.image_url,
            "is_active": self.is_active,
        }
