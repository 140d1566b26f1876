"""
Cart and submission context.

A Cart lives for one request: it is built from the client's line list,
priced against the local catalog and turned into order item snapshots.
SubmissionContext carries who is submitting and whether the client is
offline, so nothing about the caller lives in module state.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from ..extensions import db
from ..models import Product, User
from ..validation import ValidationError, format_cents, parse_money_cents, parse_optional_int, parse_quantity


@dataclass
class SubmissionContext:
    user: User
    offline: bool = False


@dataclass
class CartLine:
    product: Product
    quantity: int
    variant: dict | None = None

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.product.id, self.variant["id"] if self.variant else None)

    @property
    def unit_price_cents(self) -> int:
        """Variant price when the line names a variant, else the product price."""
        if self.variant and self.variant.get("price") is not None:
            return parse_money_cents(self.variant["price"], "variant price")
        return self.product.price_cents

    def to_item(self) -> dict:
        return {
            "product_id": self.product.id,
            "bigcommerce_product_id": self.product.bigcommerce_id,
            "variant_id": self.variant["id"] if self.variant else None,
            "variant_options": list(self.variant.get("option_values") or []) if self.variant else [],
            "quantity": self.quantity,
            "price_at_sale": format_cents(self.unit_price_cents),
            "name": self.product.name,
            "sku": (self.variant.get("sku") if self.variant else None) or self.product.sku,
            "image": self.product.image,
        }


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    def _find(self, product_id: int, variant_id: int | None) -> CartLine | None:
        for line in self.lines:
            if line.key == (product_id, variant_id):
                return line
        return None

    def add(self, product: Product, quantity: int = 1, variant_id: int | None = None) -> CartLine:
        """
        Add `quantity` of a product (or one of its variants).

        The same product with different variants stays on separate lines.
        """
        if quantity <= 0:
            raise ValidationError("quantity must be greater than 0")
        variant = None
        if variant_id is not None:
            variant = product.find_variant(variant_id)
            if variant is None:
                raise ValidationError(f"Variant {variant_id} not found on product {product.id}")

        line = self._find(product.id, variant_id)
        if line:
            line.quantity += quantity
            return line
        line = CartLine(product=product, quantity=quantity, variant=variant)
        self.lines.append(line)
        return line

    def update_quantity(self, product_id: int, delta: int, variant_id: int | None = None) -> None:
        line = self._find(product_id, variant_id)
        if line is None:
            return
        line.quantity = max(0, line.quantity + delta)
        self.lines = [other for other in self.lines if other.quantity > 0]

    def remove(self, product_id: int, variant_id: int | None = None) -> None:
        self.lines = [line for line in self.lines if line.key != (product_id, variant_id)]

    def clear(self) -> None:
        self.lines = []

    def total_cents(self) -> int:
        return sum(line.unit_price_cents * line.quantity for line in self.lines)

    def to_order_items(self) -> list[dict]:
        return [line.to_item() for line in self.lines]

    @classmethod
    def from_payload(cls, items: list, *, pinned_only: bool = True) -> "Cart":
        """Build a cart from `[{product_id, variant_id?, quantity}]`."""
        if not isinstance(items, list) or not items:
            raise ValidationError("items must be a non-empty list")
        cart = cls()
        for raw in items:
            if not isinstance(raw, dict):
                raise ValidationError("each item must be an object")
            product_id = parse_optional_int(raw.get("product_id"), "product_id")
            if product_id is None:
                raise ValidationError("product_id is required")
            product = db.session.get(Product, product_id)
            if product is None or (pinned_only and not product.is_pinned):
                raise ValidationError(f"Product {product_id} is not available")
            cart.add(
                product,
                parse_quantity(raw.get("quantity", 1)),
                parse_optional_int(raw.get("variant_id"), "variant_id"),
            )
        return cart

    def quote(self) -> dict:
        return {
            "items": self.to_order_items(),
            "total": format_cents(self.total_cents()),
        }
