"""
Settings service: global key -> JSON value store.

Known keys are validated on write. Reads of the BigCommerce credentials and
the spreadsheet webhook fall back to environment configuration when no row
exists.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from flask import current_app

from ..extensions import db
from ..models import Setting
from ..validation import ValidationError

KEY_BIGCOMMERCE_CONFIG = "bigcommerce_config"
KEY_SHEETS_WEBHOOK = "google_sheets_webhook"

MAX_KEY_LENGTH = 128


@dataclass(frozen=True)
class GatewayConfig:
    store_hash: str
    token: str


def _validate_bigcommerce_config(value: Any) -> dict:
    if not isinstance(value, dict):
        raise ValidationError("bigcommerce_config must be an object with storeHash and token")
    store_hash = value.get("storeHash")
    token = value.get("token")
    if not isinstance(store_hash, str) or not isinstance(token, str):
        raise ValidationError("bigcommerce_config.storeHash and token must be strings")
    if not (store_hash.isascii() and token.isascii()):
        raise ValidationError("bigcommerce_config.storeHash and token must be ASCII")
    return {"storeHash": store_hash.strip(), "token": token.strip()}


def _is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _validate_webhook(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("google_sheets_webhook must be a URL string")
    url = value.strip()
    if url and not _is_http_url(url):
        raise ValidationError("google_sheets_webhook must be an http(s) URL with a host")
    return url


VALIDATORS = {
    KEY_BIGCOMMERCE_CONFIG: _validate_bigcommerce_config,
    KEY_SHEETS_WEBHOOK: _validate_webhook,
}


def get_setting(key: str) -> Setting | None:
    return db.session.query(Setting).filter_by(key=key).first()


def set_setting(key: str, value: Any) -> Setting:
    """Upsert a setting, validating the value for known keys."""
    if key is not None and not isinstance(key, str):
        raise ValidationError("key must be a string")
    key = (key or "").strip()
    if not key:
        raise ValidationError("key is required")
    if len(key) > MAX_KEY_LENGTH:
        raise ValidationError(f"key exceeds max length {MAX_KEY_LENGTH}")
    if value is None:
        raise ValidationError("value is required")

    validator = VALIDATORS.get(key)
    if validator is not None:
        value = validator(value)

    setting = get_setting(key)
    if setting is None:
        setting = Setting(key=key, value=value)
        db.session.add(setting)
    else:
        setting.value = value
    db.session.commit()
    return setting


def get_gateway_config() -> GatewayConfig | None:
    """
    Resolve BigCommerce credentials.

    The "bigcommerce_config" row wins; otherwise BIGCOMMERCE_STORE_HASH and
    BIGCOMMERCE_ACCESS_TOKEN from the app config are used. Returns None when
    neither yields a complete pair.
    """
    setting = get_setting(KEY_BIGCOMMERCE_CONFIG)
    if setting is not None and isinstance(setting.value, dict):
        store_hash = (setting.value.get("storeHash") or "").strip()
        token = (setting.value.get("token") or "").strip()
    else:
        store_hash = current_app.config.get("BIGCOMMERCE_STORE_HASH", "").strip()
        token = current_app.config.get("BIGCOMMERCE_ACCESS_TOKEN", "").strip()

    if not store_hash or not token:
        return None
    return GatewayConfig(store_hash=store_hash, token=token)


def get_sheets_webhook_url() -> str | None:
    setting = get_setting(KEY_SHEETS_WEBHOOK)
    if setting is not None:
        url = setting.value if isinstance(setting.value, str) else ""
    else:
        url = current_app.config.get("GOOGLE_SHEETS_WEBHOOK_URL", "")
    return url.strip() or None
