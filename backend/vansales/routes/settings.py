# Overview: Flask API routes for global settings; administrator only.

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..models import ROLE_ADMIN
from ..services import settings_service
from ..validation import ValidationError
from ..decorators import require_auth, require_role


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/<string:key>")
@require_auth
@require_role(ROLE_ADMIN)
def get_setting(key: str):
    setting = settings_service.get_setting(key)
    if setting is None:
        return jsonify({"error": "Setting not found"}), 404
    return jsonify(setting.to_dict())


@settings_bp.post("")
@require_auth
@require_role(ROLE_ADMIN)
def save_setting():
    payload = request.get_json(silent=True) or {}
    try:
        setting = settings_service.set_setting(payload.get("key"), payload.get("value"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(setting.to_dict()), 200
