from .auth import User, ROLE_ADMIN, ROLE_AGENT, ROLES
from .catalog import Product
from .orders import Order, OrderStateError, ORDER_STATUSES, STATUS_DRAFT, STATUS_PENDING_SYNC, STATUS_SYNCED
from .settings import Setting

__all__ = [
    'User', 'ROLE_ADMIN', 'ROLE_AGENT', 'ROLES',
    'Product',
    'Order', 'OrderStateError', 'ORDER_STATUSES', 'STATUS_DRAFT', 'STATUS_PENDING_SYNC', 'STATUS_SYNCED',
    'Setting',
]
