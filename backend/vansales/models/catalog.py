from __future__ import annotations

from sqlalchemy.orm import validates

from ..extensions import db
from ..time_utils import to_utc_z
from ..validation import format_cents, normalize_variants


class Product(db.Model):
    """
    Local cache of a BigCommerce catalog entry.

    BigCommerce stays the source of truth; rows are created by import from a
    catalog search and refreshed by the resync job. Only pinned rows are
    visible to agents.

    PRICING:
    When `variants` is non-empty it is authoritative for lines that reference a
    variant id. The product's own price_cents/stock_level apply only to
    variant-less purchases.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_pinned_name", "is_pinned", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    bigcommerce_id = db.Column(db.Integer, nullable=False, unique=True, index=True)

    sku = db.Column(db.String(255), nullable=False, default="")
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    image = db.Column(db.Text, nullable=False, default="")

    # Authoritative storage in cents; the API speaks decimal strings
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    # Advisory only: refreshed by resync, never decremented at checkout
    stock_level = db.Column(db.Integer, nullable=False, default=0)

    is_pinned = db.Column(db.Boolean, nullable=False, default=False, index=True)
    variants = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @validates("variants")
    def _normalize_variants(self, key, value):
        return normalize_variants(value)

    def find_variant(self, variant_id: int) -> dict | None:
        for variant in self.variants or []:
            if variant.get("id") == variant_id:
                return variant
        return None

    def __repr__(self) -> str:
        return f"<Product id={self.id} bigcommerce_id={self.bigcommerce_id} sku={self.sku!r} pinned={self.is_pinned}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bigcommerce_id": self.bigcommerce_id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "price": format_cents(self.price_cents),
            "stock_level": self.stock_level,
            "is_pinned": self.is_pinned,
            "variants": list(self.variants or []),
            "updated_at": to_utc_z(self.updated_at),
        }
