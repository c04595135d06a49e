import uuid

from sqlalchemy import Column, Text, Numeric, Boolean, Time, DateTime, CheckConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ..db.base import Base
from .common import utcnow


class Restaurant(Base):
    __tablename__ = "restaurants"
    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_restaurants_rating"),
        CheckConstraint("delivery_fee >= 0", name="ck_restaurants_delivery_fee"),
        CheckConstraint("minimum_order >= 0", name="ck_restaurants_minimum_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    cuisine_type = Column(Text, nullable=False)
    rating = Column(Numeric(2, 1), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    opening_time = Column(Time, nullable=True)
    closing_time = Column(Time, nullable=True)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    minimum_order = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # связи
    menu_items = relationship("MenuItem", back_populates="restaurant", passive_deletes=True)
    orders = relationship("Order", back_populates="restaurant", passive_deletes=True)
