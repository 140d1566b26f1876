from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ROLE_ADMIN = "admin"
ROLE_AGENT = "agent"
ROLES = (ROLE_ADMIN, ROLE_AGENT)


class User(db.Model):
    """
    Administrator or sales-agent account.

    Agents build and submit orders; administrators curate the catalog,
    manage accounts and hold the BigCommerce credentials.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_role_enabled", "role", "is_enabled"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_AGENT)
    is_enabled = db.Column(db.Boolean, nullable=False, default=True)

    # Agents may only query the live BigCommerce catalog when granted
    allow_bigcommerce_search = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "role": self.role,
            "is_enabled": self.is_enabled,
            "allow_bigcommerce_search": self.allow_bigcommerce_search,
            "created_at": to_utc_z(self.created_at),
        }
