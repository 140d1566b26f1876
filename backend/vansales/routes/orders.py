# Overview: Flask API routes for order submission; parses input and returns JSON responses.

# backend/vansales/routes/orders.py
"""
Order routes.

POST /api/orders answers 200 once the order is saved locally, even when the
BigCommerce sync failed: the outcome is reported in the "bigcommerce" and
"google_sheets" sections of the body so the client can show partial success.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import ROLE_ADMIN, ROLE_AGENT, OrderStateError
from ..services import order_service
from ..services.cart_service import SubmissionContext
from ..services.order_service import OrderAccessError
from ..validation import ValidationError, NotFoundError, ConflictError
from ..decorators import require_auth, require_role

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _error_response(exc: Exception):
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, OrderAccessError):
        return jsonify({"error": str(exc)}), 403
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, (ConflictError, OrderStateError)):
        return jsonify({"error": str(exc)}), 409
    return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("")
@require_auth
@require_role(ROLE_AGENT)
def create_order():
    """
    Submit an order and sync it to BigCommerce.

    Request body:
    - customer_name: str (required)
    - customer_email: str (optional)
    - bigcommerce_customer_id: int (optional)
    - billing_address: object with at least street_1/address1 (required)
    - items: [{product_id, bigcommerce_product_id?, variant_id?, variant_options?,
               quantity, price_at_sale, name, sku, image}] (required)
    - total: decimal string, must equal the sum of the lines (required)
    - created_by_user_id: int (optional, must be the caller)
    - order_note: str (optional)
    """
    payload = request.get_json(silent=True)
    context = SubmissionContext(user=g.current_user)
    try:
        order_request = order_service.parse_order_request(payload)
        result = order_service.submit_order(order_request, context)
    except (ValidationError, OrderAccessError) as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result.to_dict()), 200


@orders_bp.post("/draft")
@require_auth
@require_role(ROLE_AGENT)
def create_draft():
    """Save an order captured offline; billing address is optional."""
    payload = request.get_json(silent=True)
    context = SubmissionContext(user=g.current_user, offline=True)
    try:
        order_request = order_service.parse_order_request(payload, require_address=False)
        result = order_service.submit_order(order_request, context)
    except (ValidationError, OrderAccessError) as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to save draft order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"order": result.order.to_dict()}), 201


@orders_bp.post("/<int:order_id>/submit-draft")
@require_auth
def submit_draft(order_id: int):
    """
    Submit a draft, or retry a failed sync.

    Request body:
    - bigcommerce_customer_id: int (optional)
    - billing_address: object (required unless already stored on the order)
    """
    payload = request.get_json(silent=True) or {}
    context = SubmissionContext(user=g.current_user)
    try:
        result = order_service.resubmit_draft(order_id, payload, context)
    except (ValidationError, OrderAccessError, NotFoundError, ConflictError, OrderStateError) as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to submit draft order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result.to_dict()), 200


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order(order_id: int):
    try:
        order = order_service.get_order_for(order_id, g.current_user)
    except (NotFoundError, OrderAccessError) as e:
        return _error_response(e)
    return jsonify({"order": order.to_dict()})


@orders_bp.get("/user/<int:user_id>")
@require_auth
def list_user_orders(user_id: int):
    """Order history, newest first. Agents may only read their own."""
    if g.current_user.role != ROLE_ADMIN and g.current_user.id != user_id:
        return jsonify({"error": "Forbidden"}), 403
    return jsonify(order_service.list_orders_for_user(user_id))


@orders_bp.get("/pending")
@require_auth
@require_role(ROLE_ADMIN)
def list_pending():
    """Orders awaiting sync, including failed attempts (sync_error set)."""
    return jsonify(order_service.list_pending_orders())


@orders_bp.get("/drafts")
@require_auth
def list_drafts():
    return jsonify(order_service.list_drafts(g.current_user))
