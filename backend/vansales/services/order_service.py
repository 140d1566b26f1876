"""
Order submission workflow.

Turns a cart snapshot into a BigCommerce order and records the outcome
locally whether or not BigCommerce accepts it:

1. Validate the request (no side effects on failure).
2. Persist the order as pending_sync, so a crash or network loss leaves a
   recoverable row instead of a lost order.
3. Build the V2 order payload and POST it (single attempt).
4. Reconcile: synced + remote id on success, sync_error on failure.
5. Mirror a summary to the spreadsheet webhook when one is configured.

Gateway and mirror failures are converted into data on the order and in the
returned SubmissionResult; they never propagate as exceptions. Retrying is
left to the operator (resubmit_draft).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import current_app

from ..extensions import db
from ..models import Order, Product, User, STATUS_DRAFT, STATUS_PENDING_SYNC, STATUS_SYNCED
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    format_cents,
    parse_money_cents,
    parse_optional_int,
    parse_quantity,
)
from .bigcommerce_client import GatewayError, get_client
from .cart_service import SubmissionContext
from .sheets_service import MirrorResult, mirror_order

PLACEHOLDER_NAME = "N/A"
MAX_NOTE_LENGTH = 1000


class OrderAccessError(Exception):
    """Raised when a user acts on an order that belongs to someone else."""


@dataclass
class BillingAddress:
    street_1: str
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    street_2: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""
    country_iso2: str = ""
    phone: str = ""
    email: str = ""

    # BigCommerce V3 address field -> V2 order field
    ALIASES = {
        "address1": "street_1",
        "address2": "street_2",
        "state_or_province": "state",
        "postal_code": "zip",
        "country_code": "country_iso2",
    }

    @classmethod
    def parse(cls, raw: Any) -> "BillingAddress":
        """
        Accept either a V3 customer address (address1, postal_code, ...) or
        a V2 order address (street_1, zip, ...).
        """
        if not isinstance(raw, dict):
            raise ValidationError("billing_address is required")
        values = {}
        for key, value in raw.items():
            target = cls.ALIASES.get(key, key)
            if target in cls.__dataclass_fields__ and value is not None:
                if not values.get(target):
                    values[target] = str(value).strip()
        if not values.get("street_1"):
            raise ValidationError("billing_address requires a first address line")
        return cls(**values)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass
class OrderRequest:
    customer_name: str
    items: list[dict]
    total_cents: int
    customer_email: str | None = None
    bigcommerce_customer_id: int | None = None
    billing_address: BillingAddress | None = None
    order_note: str | None = None
    created_by_user_id: int | None = None


@dataclass
class GatewayResult:
    success: bool
    order_id: int | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {"success": self.success, "order_id": self.order_id, "error": self.error}


@dataclass
class SubmissionResult:
    order: Order
    bigcommerce: GatewayResult
    google_sheets: MirrorResult = field(default_factory=lambda: MirrorResult(success=False, configured=False))

    def to_dict(self) -> dict:
        return {
            "order": self.order.to_dict(),
            "bigcommerce": self.bigcommerce.to_dict(),
            "google_sheets": self.google_sheets.to_dict(),
        }


def _parse_variant_options(raw: Any) -> list[dict]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, list) or not all(isinstance(o, dict) for o in raw):
        raise ValidationError("variant_options must be a list of objects")
    return [
        {
            "id": o.get("id"),
            "option_id": o.get("option_id"),
            "label": o.get("label") or "",
            "option_display_name": o.get("option_display_name") or "",
        }
        for o in raw
    ]


def parse_order_item(raw: Any, index: int) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError(f"items[{index}] must be an object")
    product_id = parse_optional_int(raw.get("product_id"), f"items[{index}].product_id")
    if product_id is None:
        raise ValidationError(f"items[{index}].product_id is required")
    price_cents = parse_money_cents(raw.get("price_at_sale"), f"items[{index}].price_at_sale")
    return {
        "product_id": product_id,
        "bigcommerce_product_id": parse_optional_int(
            raw.get("bigcommerce_product_id", raw.get("bigcommerce_id")),
            f"items[{index}].bigcommerce_product_id",
        ),
        "variant_id": parse_optional_int(raw.get("variant_id"), f"items[{index}].variant_id"),
        "variant_options": _parse_variant_options(raw.get("variant_options", raw.get("option_values"))),
        "quantity": parse_quantity(raw.get("quantity"), f"items[{index}].quantity"),
        "price_at_sale": format_cents(price_cents),
        "name": str(raw.get("name") or ""),
        "sku": str(raw.get("sku") or ""),
        "image": str(raw.get("image") or ""),
    }


def line_total_cents(items: list[dict]) -> int:
    return sum(parse_money_cents(i["price_at_sale"], "price_at_sale") * i["quantity"] for i in items)


def parse_order_request(payload: Any, *, require_address: bool = True) -> OrderRequest:
    """
    Validate an order submission.

    Raises ValidationError for anything BigCommerce could not turn into an
    order: no billing address (or one without a street line), no items, bad
    quantities or prices, or a total that disagrees with the lines.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    customer_name = str(payload.get("customer_name") or "").strip()
    if not customer_name:
        raise ValidationError("customer_name is required")

    raw_address = payload.get("billing_address")
    address = None
    if require_address or raw_address:
        address = BillingAddress.parse(raw_address)

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")
    items = [parse_order_item(raw, i) for i, raw in enumerate(raw_items)]

    total_cents = parse_money_cents(payload.get("total"), "total")
    expected = line_total_cents(items)
    if total_cents != expected:
        raise ValidationError(
            f"total {format_cents(total_cents)} does not match line items ({format_cents(expected)})"
        )

    note = payload.get("order_note")
    note = str(note).strip() if note is not None else None
    if note and len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"order_note exceeds max length {MAX_NOTE_LENGTH}")

    email = str(payload.get("customer_email") or "").strip() or None

    return OrderRequest(
        customer_name=customer_name,
        items=items,
        total_cents=total_cents,
        customer_email=email,
        bigcommerce_customer_id=parse_optional_int(payload.get("bigcommerce_customer_id"), "bigcommerce_customer_id"),
        billing_address=address,
        order_note=note or None,
        created_by_user_id=parse_optional_int(payload.get("created_by_user_id"), "created_by_user_id"),
    )


def split_customer_name(name: str) -> tuple[str, str]:
    """First token is the first name, the rest the last name."""
    tokens = (name or "").split()
    first = tokens[0] if tokens else ""
    last = " ".join(tokens[1:])
    return first or PLACEHOLDER_NAME, last or PLACEHOLDER_NAME


def _remote_product_id(item: dict) -> int:
    if item.get("bigcommerce_product_id") is not None:
        return item["bigcommerce_product_id"]
    product = db.session.get(Product, item["product_id"])
    if product is None:
        raise GatewayError(f"Product {item['product_id']} has no BigCommerce product id")
    return product.bigcommerce_id


def build_bigcommerce_order(order: Order) -> dict:
    """
    Shape a local order as a BigCommerce V2 order.

    Tax is left to BigCommerce: both inc/ex tax prices carry price_at_sale.
    """
    first_name, last_name = split_customer_name(order.customer_name)
    address = order.billing_address or {}

    products = []
    for item in order.items or []:
        price = float(item["price_at_sale"])
        line = {
            "product_id": _remote_product_id(item),
            "quantity": item["quantity"],
            "price_inc_tax": price,
            "price_ex_tax": price,
        }
        options = [
            {"id": o["option_id"], "value": str(o["id"])}
            for o in item.get("variant_options") or []
            if o.get("option_id") is not None and o.get("id") is not None
        ]
        if options:
            line["product_options"] = options
        products.append(line)

    payload = {
        "customer_id": order.bigcommerce_customer_id or 0,
        "billing_address": {
            "first_name": first_name,
            "last_name": last_name,
            "company": address.get("company") or current_app.config["DEFAULT_BILLING_COMPANY"],
            "street_1": address.get("street_1", ""),
            "street_2": address.get("street_2", ""),
            "city": address.get("city", ""),
            "state": address.get("state", ""),
            "zip": address.get("zip", ""),
            "country": address.get("country", ""),
            "country_iso2": address.get("country_iso2", ""),
            "phone": address.get("phone", ""),
            "email": address.get("email") or order.customer_email or "",
        },
        "products": products,
    }
    if order.order_note:
        payload["staff_notes"] = order.order_note
    return payload


def _sync(order: Order) -> GatewayResult:
    """Create the remote order and reconcile local status with the outcome."""
    try:
        client = get_client()
        remote = client.create_order(build_bigcommerce_order(order))
        remote_id = int(remote["id"])
    except GatewayError as exc:
        error = str(exc)
        current_app.logger.warning("Order %s did not sync to BigCommerce: %s", order.id, error)
        order.mark_sync_failed(error)
        db.session.commit()
        return GatewayResult(success=False, error=error)

    order.mark_synced(remote_id)
    db.session.commit()
    current_app.logger.info("Order %s synced to BigCommerce order %s", order.id, remote_id)
    return GatewayResult(success=True, order_id=remote_id)


def _mirror(order: Order) -> MirrorResult:
    result = mirror_order(order)
    if result.configured:
        order.google_sheets_logged = result.success
        order.google_sheets_error = result.error
        db.session.commit()
    return result


def _resolve_owner(request: OrderRequest, context: SubmissionContext) -> int:
    user = context.user
    owner_id = request.created_by_user_id or user.id
    if owner_id != user.id:
        raise OrderAccessError("Orders can only be submitted on your own behalf")
    return owner_id


def _new_order(request: OrderRequest, owner_id: int, status: str) -> Order:
    order = Order(
        customer_name=request.customer_name,
        customer_email=request.customer_email,
        bigcommerce_customer_id=request.bigcommerce_customer_id,
        billing_address=request.billing_address.to_dict() if request.billing_address else None,
        status=status,
        order_note=request.order_note,
        items=request.items,
        total_cents=request.total_cents,
        created_by_user_id=owner_id,
    )
    db.session.add(order)
    db.session.commit()
    return order


def save_draft(request: OrderRequest, context: SubmissionContext) -> Order:
    """Persist an order captured offline; no remote call."""
    return _new_order(request, _resolve_owner(request, context), STATUS_DRAFT)


def submit_order(request: OrderRequest, context: SubmissionContext) -> SubmissionResult:
    """
    Run the full workflow for a validated request.

    An offline context short-circuits to a draft. Otherwise the order is
    committed as pending_sync before BigCommerce is contacted.
    """
    if context.offline:
        order = save_draft(request, context)
        return SubmissionResult(
            order=order,
            bigcommerce=GatewayResult(success=False, error="Saved as draft while offline"),
        )

    if request.billing_address is None:
        raise ValidationError("billing_address is required")

    order = _new_order(request, _resolve_owner(request, context), STATUS_PENDING_SYNC)
    gateway = _sync(order)
    sheets = _mirror(order)
    return SubmissionResult(order=order, bigcommerce=gateway, google_sheets=sheets)


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def _check_access(order: Order, user: User) -> None:
    if not user.is_admin and order.created_by_user_id != user.id:
        raise OrderAccessError("Order belongs to another user")


def get_order_for(order_id: int, user: User) -> Order:
    order = get_order(order_id)
    _check_access(order, user)
    return order


def resubmit_draft(order_id: int, payload: dict, context: SubmissionContext) -> SubmissionResult:
    """
    Complete a draft (or retry a failed pending_sync order) once customer and
    address data are available, re-entering the workflow at the remote call.
    """
    order = get_order_for(order_id, context.user)
    if order.status == STATUS_SYNCED:
        raise ConflictError("Order is already synced")

    payload = payload or {}
    address = BillingAddress.parse(payload.get("billing_address") or order.billing_address)
    customer_id = parse_optional_int(payload.get("bigcommerce_customer_id"), "bigcommerce_customer_id")

    order.billing_address = address.to_dict()
    if customer_id is not None:
        order.bigcommerce_customer_id = customer_id
    order.transition(STATUS_PENDING_SYNC)
    db.session.commit()

    gateway = _sync(order)
    sheets = _mirror(order)
    return SubmissionResult(order=order, bigcommerce=gateway, google_sheets=sheets)


def _serialize(orders: list[Order]) -> dict:
    return {
        "items": [o.to_dict() for o in orders],
        "count": len(orders),
    }


def list_orders_for_user(user_id: int) -> dict:
    orders = (
        db.session.query(Order)
        .filter(Order.created_by_user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return _serialize(orders)


def list_pending_orders() -> dict:
    orders = (
        db.session.query(Order)
        .filter(Order.status == STATUS_PENDING_SYNC)
        .order_by(Order.created_at.asc(), Order.id.asc())
        .all()
    )
    return _serialize(orders)


def list_drafts(user: User) -> dict:
    """Agents see their own drafts; admins see every draft."""
    query = db.session.query(Order).filter(Order.status == STATUS_DRAFT)
    if not user.is_admin:
        query = query.filter(Order.created_by_user_id == user.id)
    return _serialize(query.order_by(Order.created_at.desc(), Order.id.desc()).all())
