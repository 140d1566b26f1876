# Overview: Flask API routes proxying BigCommerce lookups with server-side credentials.

# backend/vansales/routes/bigcommerce.py
"""
BigCommerce proxy routes.

Credentials never leave the server: the stored "bigcommerce_config" (or the
environment fallback) is used for every call.

- Catalog search: admins, or agents with allow_bigcommerce_search
- Customer search / addresses: any authenticated user (needed at checkout)
"""
from flask import Blueprint, request, jsonify

from ..services.bigcommerce_client import GatewayError, GatewayNotConfiguredError, get_client
from ..decorators import require_auth, require_search_permission

bigcommerce_bp = Blueprint("bigcommerce", __name__, url_prefix="/api/bigcommerce")


def _gateway_error(exc: GatewayError):
    if isinstance(exc, GatewayNotConfiguredError):
        return jsonify({"error": str(exc)}), 400
    return jsonify({"error": str(exc), "status_code": exc.status_code}), 502


def _query_arg():
    return (request.args.get("query") or "").strip()


@bigcommerce_bp.get("/products/search")
@require_auth
@require_search_permission
def search_products():
    query = _query_arg()
    if not query:
        return jsonify({"error": "query is required"}), 400
    try:
        products = get_client().search_products(query)
    except GatewayError as e:
        return _gateway_error(e)
    return jsonify({"items": products, "count": len(products)})


@bigcommerce_bp.get("/customers/search")
@require_auth
def search_customers():
    query = _query_arg()
    if not query:
        return jsonify({"error": "query is required"}), 400
    try:
        customers = get_client().search_customers(query)
    except GatewayError as e:
        return _gateway_error(e)
    return jsonify({"items": customers, "count": len(customers)})


@bigcommerce_bp.get("/customers/<int:customer_id>/addresses")
@require_auth
def customer_addresses(customer_id: int):
    try:
        addresses = get_client().get_customer_addresses(customer_id)
    except GatewayError as e:
        return _gateway_error(e)
    return jsonify({"items": addresses, "count": len(addresses)})
