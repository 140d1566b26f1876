from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..validation import format_cents

STATUS_DRAFT = "draft"
STATUS_PENDING_SYNC = "pending_sync"
STATUS_SYNCED = "synced"

# Lifecycle only moves forward through this sequence
ORDER_STATUSES = (STATUS_DRAFT, STATUS_PENDING_SYNC, STATUS_SYNCED)


class OrderStateError(Exception):
    """Raised when an order transition would move its status backwards."""


class Order(db.Model):
    """
    Sales order captured by an agent.

    LIFECYCLE:
    draft -> pending_sync -> synced

    A failed BigCommerce sync leaves the order in pending_sync with
    sync_error set, so an operator can resubmit it. Orders are never deleted.

    `items` holds point-in-time line snapshots (price_at_sale, name, sku,
    image) rather than references to the live Product rows.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_user_created", "created_by_user_id", "created_at"),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    bigcommerce_customer_id = db.Column(db.Integer, nullable=True)
    billing_address = db.Column(db.JSON, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=STATUS_DRAFT, index=True)
    sync_error = db.Column(db.Text, nullable=True)
    order_note = db.Column(db.Text, nullable=True)

    items = db.Column(db.JSON, nullable=False, default=list)
    total_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    bigcommerce_order_id = db.Column(db.Integer, nullable=True)
    synced_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Spreadsheet mirror outcome (never affects status)
    google_sheets_logged = db.Column(db.Boolean, nullable=False, default=False)
    google_sheets_error = db.Column(db.Text, nullable=True)

    created_by = db.relationship("User", backref=db.backref("orders", lazy=True))

    def transition(self, status: str) -> None:
        """Move to `status`, refusing backwards moves."""
        if status not in ORDER_STATUSES:
            raise OrderStateError(f"Unknown order status: {status}")
        current = ORDER_STATUSES.index(self.status or STATUS_DRAFT)
        if ORDER_STATUSES.index(status) < current:
            raise OrderStateError(f"Cannot move order {self.id} from {self.status} to {status}")
        self.status = status

    def mark_synced(self, bigcommerce_order_id: int) -> None:
        if bigcommerce_order_id is None:
            raise OrderStateError("A synced order requires a BigCommerce order id")
        self.transition(STATUS_SYNCED)
        self.bigcommerce_order_id = bigcommerce_order_id
        self.sync_error = None
        self.synced_at = utcnow()

    def mark_sync_failed(self, error: str) -> None:
        self.transition(STATUS_PENDING_SYNC)
        self.sync_error = error or "Unknown BigCommerce error"

    @property
    def total(self) -> str:
        return format_cents(self.total_cents)

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status} total={self.total}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "bigcommerce_customer_id": self.bigcommerce_customer_id,
            "billing_address": self.billing_address,
            "status": self.status,
            "sync_error": self.sync_error,
            "order_note": self.order_note,
            "items": list(self.items or []),
            "total": self.total,
            "date": to_utc_z(self.created_at),
            "created_by_user_id": self.created_by_user_id,
            "bigcommerce_order_id": self.bigcommerce_order_id,
            "synced_at": to_utc_z(self.synced_at) if self.synced_at else None,
            "google_sheets_logged": self.google_sheets_logged,
            "google_sheets_error": self.google_sheets_error,
        }
