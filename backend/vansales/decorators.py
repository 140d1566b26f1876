# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .extensions import db
from .models import User
from .services.auth_service import can_search_catalog

USER_ID_HEADER = "X-User-Id"


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require an authenticated, enabled user.

    Every request carries the caller's id in the X-User-Id header. The user
    is reloaded on each request, so disabling an account takes effect
    immediately.

    Sets g.current_user to the authenticated User.

    Returns 401 if:
    - No X-User-Id header (or a non-numeric one)
    - Unknown user id
    - User account disabled
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw_user_id = (request.headers.get(USER_ID_HEADER) or "").strip()

        if not raw_user_id.isdigit():
            return jsonify({"error": "Unauthorized"}), 401

        user = db.session.get(User, int(raw_user_id))

        if not user or not user.is_enabled:
            return jsonify({"error": "Unauthorized"}), 401

        g.current_user = user

        return f(*args, **kwargs)

    return decorated_function


def require_role(role: str):
    """Require the authenticated user to hold `role` ("admin" or "agent")."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Unauthorized"}), 401

            if g.current_user.role != role:
                return jsonify({
                    "error": "Forbidden",
                    "required_role": role,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_search_permission(f):
    """Admins, or agents granted allow_bigcommerce_search."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Unauthorized"}), 401

        if not can_search_catalog(g.current_user):
            return jsonify({"error": "BigCommerce search is not enabled for this account"}), 403

        return f(*args, **kwargs)

    return decorated_function
