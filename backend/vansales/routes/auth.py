# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/vansales/routes/auth.py
"""
Authentication API routes.

Login verifies the bcrypt password and returns the user record (never the
hash). The client then sends the user id in X-User-Id on every request.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services.auth_service import AccountDisabledError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user.

    Returns:
        200 with the user record on success
        401 for unknown username or wrong password
        403 for a disabled account, whatever password was supplied
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
            return jsonify({"error": "username and password required"}), 400

        try:
            user = auth_service.authenticate(username, password)
        except AccountDisabledError:
            return jsonify({"error": "Account is disabled"}), 403

        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        return jsonify({
            "user": user.to_dict(),
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Return the user identified by X-User-Id."""
    return jsonify({"user": g.current_user.to_dict()})
