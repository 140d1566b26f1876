# backend/vansales/routes/system.py
"""
System health endpoint.

Reports database reachability and whether the outbound integrations have
credentials, without contacting BigCommerce.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import User, Product, Order, STATUS_PENDING_SYNC
from ..services import settings_service
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        product_count = db.session.query(Product).count()
        pending_count = db.session.query(Order).filter_by(status=STATUS_PENDING_SYNC).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "products": product_count,
                "pending_sync_orders": pending_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": database["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }
    if healthy:
        body["checks"]["bigcommerce"] = {"configured": settings_service.get_gateway_config() is not None}
        body["checks"]["google_sheets"] = {"configured": settings_service.get_sheets_webhook_url() is not None}
    return body, 200 if healthy else 503
