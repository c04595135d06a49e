import enum
import uuid

from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey, CheckConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ..db.base import Base
from .common import utcnow, enum_check


class OrderStatusEnum(str, enum.Enum):
    pending = "pending"
    preparing = "preparing"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethodEnum(str, enum.Enum):
    cash = "cash"
    card = "card"
    online = "online"


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(enum_check("status", OrderStatusEnum), name="ck_orders_status"),
        CheckConstraint(enum_check("payment_method", PaymentMethodEnum), name="ck_orders_payment_method"),
        CheckConstraint(enum_check("payment_status", PaymentStatusEnum), name="ck_orders_payment_status"),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount"),
        CheckConstraint("delivery_fee >= 0", name="ck_orders_delivery_fee"),
        CheckConstraint("length(customer_name) > 0", name="ck_orders_customer_name"),
        CheckConstraint("length(customer_phone) > 0", name="ck_orders_customer_phone"),
        CheckConstraint("length(customer_address) > 0", name="ck_orders_customer_address"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(
        Uuid, ForeignKey("restaurants.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    customer_name = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    customer_address = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=OrderStatusEnum.pending.value, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    payment_method = Column(String(16), nullable=False, default=PaymentMethodEnum.cash.value)
    payment_status = Column(String(16), nullable=False, default=PaymentStatusEnum.pending.value)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # связи
    restaurant = relationship("Restaurant", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )
