from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

_CENT = Decimal("0.01")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""


class NotFoundError(LookupError):
    """404-level missing resource."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or 'e' in stripped.lower() or '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        return parse_bool(value, col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    Keys outside the allowlist are ignored rather than rejected, since
    clients post whole catalog records (including computed fields like id).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for required text fields
        if isinstance(col.type, (String, Text)) and k in required:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{field} must be a boolean")


def parse_optional_int(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{field} must be an integer")


def parse_quantity(value: Any, field: str = "quantity") -> int:
    qty = parse_optional_int(value, field)
    if qty is None or qty <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return qty


def parse_money_cents(value: Any, field: str) -> int:
    """
    Parse a non-negative decimal amount ("12.5", "12.50", 12.5) into cents.

    Floats are routed through str() so 0.1 + 0.2 style artefacts from
    JSON clients round to the intended cent.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a decimal amount")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a decimal amount")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    cents = int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} cannot exceed {format_cents(MAX_PRICE_CENTS)}")
    return cents


def format_cents(cents: int | None) -> str | None:
    """Render cents as a two-decimal string ("1250" -> "12.50")."""
    if cents is None:
        return None
    return str((Decimal(cents) / 100).quantize(_CENT))


def _normalize_option_value(raw: Any) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError("variant option_values must be objects")
    return {
        "id": raw.get("id"),
        "option_id": raw.get("option_id"),
        "label": str(raw.get("label") or ""),
        "option_display_name": str(raw.get("option_display_name") or ""),
    }


def normalize_variants(raw: Any) -> list[dict]:
    """
    Coerce a product's variant payload into a list of variant dicts.

    Accepts None, a JSON-encoded string, or a list of loosely shaped dicts
    (BigCommerce uses inventory_level where the local catalog uses stock_level).
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("variants must be a JSON array")
    if not isinstance(raw, list):
        raise ValidationError("variants must be a list")

    variants = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("each variant must be an object")
        variant_id = parse_optional_int(item.get("id"), "variant id")
        if variant_id is None:
            raise ValidationError("each variant requires an id")
        price = item.get("price")
        if price is None:
            price = item.get("calculated_price")
        stock = item.get("stock_level", item.get("inventory_level", 0))
        variants.append({
            "id": variant_id,
            "sku": str(item.get("sku") or ""),
            "price": format_cents(parse_money_cents(price, "variant price")) if price is not None else None,
            "stock_level": parse_optional_int(stock, "variant stock_level") or 0,
            "option_values": [_normalize_option_value(o) for o in (item.get("option_values") or [])],
        })
    return variants
