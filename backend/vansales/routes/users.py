# Overview: Flask API routes for user management; parses input and returns JSON responses.

# backend/vansales/routes/users.py
"""
Admin routes for agent and administrator accounts.

All endpoints require an authenticated administrator.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import ROLE_ADMIN, ROLE_AGENT
from ..services import auth_service
from ..validation import ValidationError, ConflictError, NotFoundError, parse_bool
from ..decorators import require_auth, require_role

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _user_list(role: str):
    users = auth_service.list_users(role)
    return jsonify({"items": [u.to_dict() for u in users], "count": len(users)})


@users_bp.get("/agents")
@require_auth
@require_role(ROLE_ADMIN)
def list_agents():
    return _user_list(ROLE_AGENT)


@users_bp.get("/admins")
@require_auth
@require_role(ROLE_ADMIN)
def list_admins():
    return _user_list(ROLE_ADMIN)


@users_bp.post("")
@require_auth
@require_role(ROLE_ADMIN)
def create_user():
    """
    Create a new user.

    Request body:
    - username: str (required)
    - password: str (required)
    - name: str (required)
    - role: "admin" | "agent" (default "agent")
    """
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.create_user(
            username=data.get("username"),
            password=data.get("password"),
            name=data.get("name"),
            role=data.get("role") or ROLE_AGENT,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 201


@users_bp.patch("/<int:user_id>/status")
@require_auth
@require_role(ROLE_ADMIN)
def update_status(user_id: int):
    data = request.get_json(silent=True) or {}
    try:
        is_enabled = parse_bool(data.get("is_enabled"), "is_enabled")
        user = auth_service.set_enabled(user_id, is_enabled, actor=g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"success": True, "user": user.to_dict()})


@users_bp.patch("/<int:user_id>/permission")
@require_auth
@require_role(ROLE_ADMIN)
def update_permission(user_id: int):
    data = request.get_json(silent=True) or {}
    try:
        allowed = parse_bool(data.get("allow_bigcommerce_search"), "allow_bigcommerce_search")
        user = auth_service.set_search_permission(user_id, allowed)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"success": True, "user": user.to_dict()})


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_user(user_id: int):
    try:
        auth_service.delete_user(user_id, actor=g.current_user)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"success": True})
