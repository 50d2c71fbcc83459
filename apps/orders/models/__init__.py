"""
Orders models, split across modules. Import from here:

    from apps.orders.models import Order, OrderItem
"""

from .order import Order, OrderQuerySet  # noqa: F401
from .item import OrderItem, UNKNOWN_PRODUCT  # noqa: F401
