# Overview: Flask API route for pricing a cart against the local catalog.

from flask import Blueprint, request, jsonify

from ..services.cart_service import Cart
from ..validation import ValidationError
from ..decorators import require_auth

cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


@cart_bp.post("/quote")
@require_auth
def quote_cart():
    """
    Price `{items: [{product_id, variant_id?, quantity}]}` against pinned
    products. The response items are order line snapshots ready for
    POST /api/orders.
    """
    payload = request.get_json(silent=True) or {}
    try:
        cart = Cart.from_payload(payload.get("items"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(cart.quote())
