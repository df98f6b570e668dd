"""Order domain exports"""

from .models import DeliveryOption, OrderRecord, OrderStatus
from .service import OrderService

__all__ = [
    "DeliveryOption",
    "OrderRecord",
    "OrderService",
    "OrderStatus",
]
