"""
Spreadsheet mirror.

Posts a flattened order summary to the configured Google Sheets webhook
(typically an Apps Script web app). Best effort: a failure is returned to
the caller and never raised.
"""
from __future__ import annotations

from dataclasses import dataclass

import httpx
from flask import current_app

from ..models import Order
from ..time_utils import to_utc_z
from .settings_service import get_sheets_webhook_url


@dataclass
class MirrorResult:
    success: bool
    configured: bool = True
    error: str | None = None

    def to_dict(self) -> dict:
        return {"success": self.success, "configured": self.configured, "error": self.error}


def build_row(order: Order) -> dict:
    items = []
    for item in order.items or []:
        options = ", ".join(
            f"{o.get('option_display_name')}: {o.get('label')}".strip(": ")
            for o in item.get("variant_options") or []
        )
        items.append({
            "name": item.get("name"),
            "sku": item.get("sku"),
            "quantity": item.get("quantity"),
            "price": item.get("price_at_sale"),
            "options": options,
        })
    return {
        "order_id": order.id,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email or "",
        "total": order.total,
        "date": to_utc_z(order.created_at),
        "bigcommerce_order_id": order.bigcommerce_order_id,
        "synced": order.bigcommerce_order_id is not None,
        "agent": order.created_by.name if order.created_by else None,
        "items": items,
    }


def mirror_order(order: Order) -> MirrorResult:
    url = get_sheets_webhook_url()
    if not url:
        return MirrorResult(success=False, configured=False)

    try:
        with httpx.Client(transport=current_app.config.get("OUTBOUND_HTTP_TRANSPORT"), follow_redirects=True) as client:
            response = client.post(url, json=build_row(order))
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        current_app.logger.warning("Sheets mirror failed for order %s: %s", order.id, exc)
        return MirrorResult(success=False, error=f"Google Sheets webhook failed: {exc}")

    if response.is_error:
        current_app.logger.warning(
            "Sheets mirror for order %s returned %s", order.id, response.status_code
        )
        return MirrorResult(
            success=False,
            error=f"Google Sheets webhook error {response.status_code}: {response.text[:500]}",
        )

    return MirrorResult(success=True)
