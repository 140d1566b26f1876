"""
BigCommerce REST client.

Thin wrapper over httpx for the handful of catalog, customer and order
endpoints the app consumes. Every call is a single attempt with the httpx
default timeout; non-2xx responses and transport failures surface as
GatewayError carrying the status code and response text.
"""
from __future__ import annotations

import re
from typing import Any

import httpx
from flask import current_app

from . import settings_service


class GatewayError(Exception):
    """BigCommerce call failed (transport error or non-2xx response)."""
    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GatewayNotConfiguredError(GatewayError):
    """No store hash / access token available."""


_TAG_RE = re.compile(r"<[^>]*>?")


def strip_html(text: str | None) -> str:
    return _TAG_RE.sub("", text or "").strip()


def map_variant(data: dict) -> dict:
    price = data.get("price")
    if price is None:
        price = data.get("calculated_price")
    return {
        "id": data.get("id"),
        "sku": data.get("sku") or "",
        "price": None if price is None else str(price),
        "stock_level": data.get("inventory_level") or 0,
        "option_values": [
            {
                "id": o.get("id"),
                "option_id": o.get("option_id"),
                "label": o.get("label") or "",
                "option_display_name": o.get("option_display_name") or "",
            }
            for o in (data.get("option_values") or [])
        ],
    }


def map_product(data: dict) -> dict:
    """
    Map a V3 catalog product onto the local product shape.

    BigCommerce returns a "base variant" without option values for products
    that have no options; those carry nothing the product row doesn't, so
    they are dropped.
    """
    image = data.get("primary_image") or {}
    if not image and data.get("images"):
        image = data["images"][0]
    variants = [
        map_variant(v) for v in (data.get("variants") or [])
        if v.get("option_values")
    ]
    return {
        "bigcommerce_id": data.get("id"),
        "name": data.get("name") or "",
        "sku": data.get("sku") or "",
        "price": str(data.get("price") if data.get("price") is not None else "0"),
        "image": image.get("url_standard") or "",
        "description": strip_html(data.get("description")),
        "stock_level": data.get("inventory_level") or 0,
        "is_pinned": False,
        "variants": variants,
    }


def map_customer(data: dict) -> dict:
    first_name = data.get("first_name") or ""
    last_name = data.get("last_name") or ""
    return {
        "id": data.get("id"),
        "first_name": first_name,
        "last_name": last_name,
        "name": f"{first_name} {last_name}".strip(),
        "email": data.get("email") or "",
        "company": data.get("company") or "",
        "phone": data.get("phone") or "",
    }


def map_address(data: dict) -> dict:
    return {
        "id": data.get("id"),
        "customer_id": data.get("customer_id"),
        "first_name": data.get("first_name") or "",
        "last_name": data.get("last_name") or "",
        "company": data.get("company") or "",
        "address1": data.get("address1") or "",
        "address2": data.get("address2") or "",
        "city": data.get("city") or "",
        "state_or_province": data.get("state_or_province") or "",
        "postal_code": data.get("postal_code") or "",
        "country": data.get("country") or "",
        "country_code": data.get("country_code") or "",
        "phone": data.get("phone") or "",
    }


class BigCommerceClient:
    def __init__(
        self,
        store_hash: str,
        token: str,
        *,
        base_url: str = "https://api.bigcommerce.com",
        transport: httpx.BaseTransport | None = None,
    ):
        self.store_hash = store_hash
        self.base_url = f"{base_url.rstrip('/')}/stores/{store_hash}"
        self._headers = {
            "X-Auth-Token": token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._transport = transport

    def _request(self, method: str, path: str, *, params: dict | None = None, json: Any = None) -> Any:
        try:
            with httpx.Client(base_url=self.base_url, headers=self._headers, transport=self._transport) as client:
                response = client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise GatewayError(f"BigCommerce request failed: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            # Malformed base URL, or credentials that cannot be sent as headers
            raise GatewayError(f"BigCommerce request could not be built: {exc}") from exc

        if response.is_error:
            raise GatewayError(
                f"BigCommerce API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError("BigCommerce returned invalid JSON", status_code=response.status_code) from exc

    def search_products(self, query: str) -> list[dict]:
        body = self._request(
            "GET",
            "/v3/catalog/products",
            params={"keyword": query, "include": "primary_image,variants"},
        )
        return [map_product(p) for p in (body or {}).get("data", [])]

    def get_product(self, product_id: int) -> dict:
        body = self._request(
            "GET",
            f"/v3/catalog/products/{product_id}",
            params={"include": "primary_image,variants"},
        )
        data = (body or {}).get("data")
        if not data:
            raise GatewayError(f"BigCommerce product {product_id} not found", status_code=404)
        return map_product(data)

    def search_customers(self, query: str) -> list[dict]:
        params = {"email:in": query} if "@" in query else {"name:like": query}
        body = self._request("GET", "/v3/customers", params=params)
        return [map_customer(c) for c in (body or {}).get("data", [])]

    def get_customer_addresses(self, customer_id: int) -> list[dict]:
        body = self._request("GET", "/v3/customers/addresses", params={"customer_id:in": customer_id})
        return [map_address(a) for a in (body or {}).get("data", [])]

    def create_order(self, payload: dict) -> dict:
        """POST /v2/orders; returns the created order record."""
        body = self._request("POST", "/v2/orders", json=payload)
        order_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(order_id, int) or isinstance(order_id, bool):
            raise GatewayError("BigCommerce order response did not include an integer order id")
        return body


def get_client() -> BigCommerceClient:
    """Build a client from the stored (or environment) credentials."""
    config = settings_service.get_gateway_config()
    if config is None:
        raise GatewayNotConfiguredError("BigCommerce is not configured")
    return BigCommerceClient(
        config.store_hash,
        config.token,
        base_url=current_app.config["BIGCOMMERCE_API_BASE"],
        transport=current_app.config.get("OUTBOUND_HTTP_TRANSPORT"),
    )
