# backend/vansales/services/catalog_service.py
"""
Catalog curation.

Administrators import products found through BigCommerce search, decide
which ones agents see ("pinned"), and periodically refresh the local copies.
Local rows are a cache of BigCommerce, never the source of truth.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    parse_money_cents,
    validate_payload,
)
from .bigcommerce_client import GatewayError, get_client

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"bigcommerce_id", "sku", "name", "description", "image", "stock_level"},
    required_on_create={"bigcommerce_id", "name"},
)


def list_products(*, pinned_only: bool = False) -> dict:
    """All products with pinned ones first, or only the agent-visible set."""
    query = db.session.query(Product)
    if pinned_only:
        query = query.filter(Product.is_pinned.is_(True))
    products = query.order_by(Product.is_pinned.desc(), Product.name.asc(), Product.id.asc()).all()
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def set_pinned(product_id: int, pinned: bool) -> Product:
    """Flip agent visibility. Local only; BigCommerce is not contacted."""
    product = get_product(product_id)
    product.is_pinned = pinned
    db.session.commit()
    return product


def import_and_pin(payload: dict) -> Product:
    """
    Import a product picked from a BigCommerce search and pin it.

    Idempotent on bigcommerce_id: a second import of the same product pins
    the existing row instead of inserting a duplicate.
    """
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    price_cents = parse_money_cents(payload.get("price", "0"), "price")
    if patch.get("stock_level") is not None and patch["stock_level"] < 0:
        raise ValidationError("stock_level must be >= 0")

    existing = db.session.query(Product).filter_by(bigcommerce_id=patch["bigcommerce_id"]).first()
    if existing:
        existing.is_pinned = True
        db.session.commit()
        return existing

    product = Product(
        bigcommerce_id=patch["bigcommerce_id"],
        name=patch["name"],
        sku=patch.get("sku") or "",
        description=patch.get("description") or "",
        image=patch.get("image") or "",
        stock_level=patch.get("stock_level") or 0,
        price_cents=price_cents,
        variants=payload.get("variants"),
        is_pinned=True,
    )
    db.session.add(product)
    db.session.commit()
    return product


def apply_remote_product(product: Product, remote: dict) -> None:
    """
    Overwrite cached fields with a fresh BigCommerce record.

    An empty remote variant list leaves the cached variants untouched: a
    degraded response must not wipe option data agents are ordering against.
    """
    product.name = remote.get("name") or product.name
    product.sku = remote.get("sku") or product.sku
    product.description = remote.get("description") or ""
    product.image = remote.get("image") or product.image
    product.price_cents = parse_money_cents(remote.get("price", "0"), "price")
    product.stock_level = max(int(remote.get("stock_level") or 0), 0)
    if remote.get("variants"):
        product.variants = remote["variants"]


def resync_pinned_products() -> dict:
    """
    Refresh every pinned product (with variants) from BigCommerce.

    Keeps going through the whole pinned set when individual fetches fail
    and reports how many rows were updated and how many failed.

    Raises GatewayNotConfiguredError when products need refreshing but no
    credentials are available.
    """
    pinned = (
        db.session.query(Product)
        .filter(Product.is_pinned.is_(True))
        .order_by(Product.id.asc())
        .all()
    )
    if not pinned:
        return {"message": "No pinned products to re-sync", "updated": 0, "errors": 0}

    client = get_client()
    updated = 0
    errors = 0

    for product in pinned:
        try:
            remote = client.get_product(product.bigcommerce_id)
            apply_remote_product(product, remote)
            db.session.commit()
            updated += 1
        except (GatewayError, ValidationError) as exc:
            db.session.rollback()
            errors += 1
            current_app.logger.warning(
                "Resync failed for product %s (bigcommerce_id=%s): %s",
                product.id, product.bigcommerce_id, exc,
            )

    current_app.logger.info("Catalog resync finished: %s updated, %s errors", updated, errors)
    message = f"Re-synced {updated} of {len(pinned)} pinned products"
    if errors:
        message += f" ({errors} failed)"
    return {"message": message, "updated": updated, "errors": errors}
