import uuid

from sqlalchemy import Column, Integer, Text, Numeric, Boolean, DateTime, ForeignKey, CheckConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ..db.base import Base
from .common import utcnow


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_menu_items_price"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)  # текущая цена, в заказ копируется
    category = Column(Text, nullable=False)  # пицца, суши, напитки и т.д.
    is_available = Column(Boolean, default=True, nullable=False)
    image_url = Column(Text, nullable=True)
    preparation_time = Column(Integer, default=15, nullable=False)  # минуты
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # связи
    restaurant = relationship("Restaurant", back_populates="menu_items")
    order_items = relationship("OrderItem", back_populates="menu_item", passive_deletes="all")
