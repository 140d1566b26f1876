# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication and user-account service.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Passwords are compared at login only; no other code path re-validates them
- Disabled accounts are refused at login and by @require_auth
- User records never serialize the password hash
"""

import bcrypt
from ..extensions import db
from ..models import User, Order, ROLES, ROLE_ADMIN, ROLE_AGENT
from ..validation import ConflictError, NotFoundError, ValidationError

MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


class AccountDisabledError(Exception):
    """Raised when a disabled account attempts to log in."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password.strip() != password:
        raise PasswordValidationError("Password must not start or end with whitespace")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user with username and password.

    Returns the User when credentials are valid, None when the username is
    unknown or the password is wrong.

    Raises AccountDisabledError for disabled accounts before the password is
    checked, so a disabled agent learns the account state regardless of the
    password supplied.
    """
    user = db.session.query(User).filter(User.username == username.strip()).first()

    if not user:
        return None

    if not user.is_enabled:
        raise AccountDisabledError("Account is disabled")

    if not verify_password(password, user.password_hash):
        return None

    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(username: str, password: str, name: str, role: str = ROLE_AGENT) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ValidationError: missing fields, unknown role or weak password
        ConflictError: username already taken
    """
    for field, value in (("username", username), ("name", name), ("password", password)):
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
    username = (username or "").strip()
    name = (name or "").strip()
    if not username or not name:
        raise ValidationError("username, password, name and role required")
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    existing = db.session.query(User).filter_by(username=username).first()
    if existing:
        raise ConflictError("Username already exists")

    user = User(
        username=username,
        name=name,
        password_hash=hash_password(password),
        role=role,
        is_enabled=True,
        allow_bigcommerce_search=False,
    )
    db.session.add(user)
    db.session.commit()
    return user


def list_users(role: str) -> list[User]:
    return db.session.query(User).filter_by(role=role).order_by(User.name.asc(), User.id.asc()).all()


def set_enabled(user_id: int, is_enabled: bool, *, actor: User | None = None) -> User:
    user = get_user(user_id)
    if actor is not None and actor.id == user.id and not is_enabled:
        raise ConflictError("You cannot disable your own account")
    user.is_enabled = is_enabled
    db.session.commit()
    return user


def set_search_permission(user_id: int, allowed: bool) -> User:
    user = get_user(user_id)
    user.allow_bigcommerce_search = allowed
    db.session.commit()
    return user


def delete_user(user_id: int, *, actor: User | None = None) -> None:
    """
    Permanently delete an account.

    Users that own orders are kept for attribution; disable them instead.
    """
    user = get_user(user_id)
    if actor is not None and actor.id == user.id:
        raise ConflictError("You cannot delete your own account")
    if db.session.query(Order.id).filter_by(created_by_user_id=user.id).first():
        raise ConflictError("User has orders; disable the account instead")
    db.session.delete(user)
    db.session.commit()


def can_search_catalog(user: User) -> bool:
    return user.role == ROLE_ADMIN or bool(user.allow_bigcommerce_search)
