from .restaurant import Restaurant
from .menu_item import MenuItem
from .order import Order, OrderStatusEnum, PaymentMethodEnum, PaymentStatusEnum
from .order_item import OrderItem

__all__ = [
    "Restaurant",
    "MenuItem",
    "Order",
    "OrderStatusEnum",
    "PaymentMethodEnum",
    "PaymentStatusEnum",
    "OrderItem",
]
