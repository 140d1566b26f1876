# backend/vansales/config.py
from __future__ import annotations
import os


def _split_csv(value: str) -> set[str]:
    return {item.strip() for item in value.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/vansales.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///vansales.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Fallback BigCommerce credentials, used when no "bigcommerce_config" setting row exists
    BIGCOMMERCE_STORE_HASH = os.environ.get("BIGCOMMERCE_STORE_HASH", "")
    BIGCOMMERCE_ACCESS_TOKEN = os.environ.get("BIGCOMMERCE_ACCESS_TOKEN", "")
    BIGCOMMERCE_API_BASE = os.environ.get("BIGCOMMERCE_API_BASE", "https://api.bigcommerce.com")

    # Fallback spreadsheet webhook, used when no "google_sheets_webhook" setting row exists
    GOOGLE_SHEETS_WEBHOOK_URL = os.environ.get("GOOGLE_SHEETS_WEBHOOK_URL", "")

    # Company printed on BigCommerce billing addresses that carry none
    DEFAULT_BILLING_COMPANY = os.environ.get("DEFAULT_BILLING_COMPANY", "Van Sales")

    CORS_ALLOWED_ORIGINS = _split_csv(
        os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        )
    )

    # httpx transport handed to every outbound client (None = real network)
    OUTBOUND_HTTP_TRANSPORT = None

