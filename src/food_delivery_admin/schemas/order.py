from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, PlainSerializer, condecimal, conint, constr

from food_delivery_admin.models import OrderStatusEnum, PaymentMethodEnum, PaymentStatusEnum

# В JSON деньги уходят числом, как и раньше отдавал API. Внутри только Decimal.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

MoneyIn = condecimal(ge=0, max_digits=10, decimal_places=2)
NonEmptyStr = constr(strip_whitespace=True, min_length=1)


class NameRef(BaseModel):
    name: str


class OrderItemCreate(BaseModel):
    menu_item_id: UUID
    quantity: conint(gt=0)
    price: MoneyIn

    class Config:
        extra = "forbid"


class OrderCreate(BaseModel):
    restaurant_id: UUID
    customer_name: NonEmptyStr
    customer_phone: NonEmptyStr
    customer_address: NonEmptyStr
    status: OrderStatusEnum = OrderStatusEnum.pending
    total_amount: MoneyIn
    delivery_fee: MoneyIn = Decimal("0")
    payment_method: PaymentMethodEnum = PaymentMethodEnum.cash
    payment_status: PaymentStatusEnum = PaymentStatusEnum.pending
    notes: Optional[str] = None
    items: List[OrderItemCreate] = []

    class Config:
        extra = "forbid"
        use_enum_values = True
        validate_default = True

    def header_values(self) -> dict:
        return self.model_dump(exclude={"items"})


class OrderUpdate(BaseModel):
    """Частичное обновление шапки заказа (PUT /orders/{id})."""

    restaurant_id: Optional[UUID] = None
    customer_name: Optional[NonEmptyStr] = None
    customer_phone: Optional[NonEmptyStr] = None
    customer_address: Optional[NonEmptyStr] = None
    status: Optional[OrderStatusEnum] = None
    total_amount: Optional[MoneyIn] = None
    delivery_fee: Optional[MoneyIn] = None
    payment_method: Optional[PaymentMethodEnum] = None
    payment_status: Optional[PaymentStatusEnum] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"
        use_enum_values = True


UPDATABLE_ORDER_FIELDS = frozenset(OrderUpdate.model_fields)
NULLABLE_ORDER_FIELDS = frozenset({"notes"})


class StatusUpdate(BaseModel):
    status: Optional[str] = None


class OrderRead(BaseModel):
    id: UUID
    restaurant_id: UUID
    customer_name: str
    customer_phone: str
    customer_address: str
    status: str
    total_amount: Money
    delivery_fee: Money
    payment_method: str
    payment_status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderListItem(OrderRead):
    restaurants: Optional[NameRef] = None

    @classmethod
    def from_orm_with_name(cls, order, restaurant_name: Optional[str]):
        data = OrderRead.model_validate(order).model_dump()
        data["restaurants"] = NameRef(name=restaurant_name) if restaurant_name is not None else None
        return cls(**data)


class OrderItemRead(BaseModel):
    id: UUID
    order_id: UUID
    menu_item_id: UUID
    quantity: int
    price: Money
    subtotal: Money
    menu_items: Optional[NameRef] = None

    @classmethod
    def from_orm_with_name(cls, item, menu_item_name: Optional[str]):
        return cls(
            id=item.id,
            order_id=item.order_id,
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            price=item.price,
            subtotal=item.subtotal,
            menu_items=NameRef(name=menu_item_name) if menu_item_name is not None else None,
        )


class OrderDetail(OrderListItem):
    items: List[OrderItemRead] = []


class OrderStats(BaseModel):
    total_orders: int = 0
    pending: int = 0
    preparing: int = 0
    delivered: int = 0
    cancelled: int = 0
    total_revenue: Money = Decimal("0")
