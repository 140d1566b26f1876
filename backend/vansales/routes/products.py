# Overview: Flask API routes for catalog curation; parses input and returns JSON responses.

# backend/vansales/routes/products.py
"""
Product catalog routes.

- Listing requires authentication (agents read the pinned catalog)
- Import, pin and resync are administrator operations
"""
from flask import Blueprint, request, jsonify, current_app

from ..models import ROLE_ADMIN
from ..services import catalog_service
from ..services.bigcommerce_client import GatewayNotConfiguredError
from ..validation import ValidationError, NotFoundError, parse_bool
from ..decorators import require_auth, require_role

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products():
    """All cached products, pinned first."""
    return catalog_service.list_products()


@products_bp.get("/pinned")
@require_auth
def list_pinned_products():
    """Agent-visible catalog."""
    return catalog_service.list_products(pinned_only=True)


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int):
    try:
        product = catalog_service.get_product(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return product.to_dict()


@products_bp.post("")
@require_auth
@require_role(ROLE_ADMIN)
def import_product():
    """
    Import a product from a BigCommerce search result and pin it.

    Re-importing an existing bigcommerce_id pins the existing row.
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = catalog_service.import_and_pin(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return product.to_dict(), 200


@products_bp.patch("/<int:product_id>/pin")
@require_auth
@require_role(ROLE_ADMIN)
def pin_product(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        is_pinned = parse_bool(payload.get("is_pinned"), "is_pinned")
        product = catalog_service.set_pinned(product_id, is_pinned)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return {"success": True, "product": product.to_dict()}, 200


@products_bp.post("/resync")
@require_auth
@require_role(ROLE_ADMIN)
def resync_products():
    """Refresh every pinned product from BigCommerce."""
    try:
        result = catalog_service.resync_pinned_products()
    except GatewayNotConfiguredError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to resync products")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200
