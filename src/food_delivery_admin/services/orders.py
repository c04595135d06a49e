import logging
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery_admin.crud import order as crud_order
from food_delivery_admin.crud.base import delete_by_id, insert_many, insert_one, transaction, update_by_id
from food_delivery_admin.errors import InvalidReferenceError, NotFoundError, ValidationError, format_validation_errors
from food_delivery_admin.models import Order, OrderItem, OrderStatusEnum
from food_delivery_admin.schemas.order import (
    NULLABLE_ORDER_FIELDS,
    UPDATABLE_ORDER_FIELDS,
    OrderCreate,
    OrderDetail,
    OrderItemRead,
    OrderListItem,
    OrderRead,
    OrderUpdate,
)

logger = logging.getLogger(__name__)

VALID_STATUSES = {status.value for status in OrderStatusEnum}


async def create_order(db: AsyncSession, order_in: OrderCreate) -> OrderRead:
    """
    Создаёт шапку заказа и все позиции в одной транзакции.
    Если позиции не записались, шапка тоже откатывается.
    Позиции в ответе не возвращаются.
    """
    async with transaction(db, "create order"):
        try:
            order = await insert_one(db, Order, order_in.header_values(), context="create order")
        except InvalidReferenceError as exc:
            raise InvalidReferenceError(f"Restaurant not found: {order_in.restaurant_id}") from exc

        rows = [{"order_id": order.id, **item.model_dump()} for item in order_in.items]
        try:
            await insert_many(db, OrderItem, rows, context=f"create items of order {order.id}")
        except InvalidReferenceError as exc:
            raise InvalidReferenceError("Menu item not found for one or more order items") from exc

    logger.info("Order %s created with %d item(s)", order.id, len(rows))
    return OrderRead.model_validate(order)


async def get_order(db: AsyncSession, order_id: UUID) -> OrderDetail:
    """
    Шапка заказа + позиции. Это два отдельных запроса:
    если заказ удалят между ними, вернётся заказ без позиций.
    """
    async with transaction(db, f"get order {order_id}"):
        header = await crud_order.get_order_header(db, order_id)
        if header is None:
            raise NotFoundError("Order not found")
        items = await crud_order.get_order_items(db, order_id)

    order, restaurant_name = header
    data = OrderListItem.from_orm_with_name(order, restaurant_name).model_dump()
    data["items"] = [OrderItemRead.from_orm_with_name(item, name) for item, name in items]
    return OrderDetail(**data)


async def list_orders(
    db: AsyncSession,
    status: Optional[str] = None,
    restaurant_id: Optional[UUID] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[OrderListItem]:
    """
    Список заказов, новые первыми. Без limit возвращает все.
    """
    async with transaction(db, "list orders"):
        rows = await crud_order.get_orders(
            db, status=status, restaurant_id=restaurant_id, limit=limit, offset=offset
        )
    return [OrderListItem.from_orm_with_name(order, name) for order, name in rows]


def _parse_update(order_id: UUID, patch: dict, unknown_fields: str) -> dict:
    if not isinstance(patch, dict):
        raise ValidationError("Request body must be a JSON object")

    unknown = sorted(set(patch) - UPDATABLE_ORDER_FIELDS)
    if unknown:
        if unknown_fields == "reject":
            raise ValidationError(f"Unknown order fields: {', '.join(unknown)}")
        logger.info("Order %s: ignoring unknown fields %s", order_id, unknown)

    known = {key: value for key, value in patch.items() if key in UPDATABLE_ORDER_FIELDS}
    nulls = sorted(key for key, value in known.items() if value is None and key not in NULLABLE_ORDER_FIELDS)
    if nulls:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}")

    try:
        return OrderUpdate.model_validate(known).model_dump(exclude_unset=True)
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from exc


async def update_order(
    db: AsyncSession,
    order_id: UUID,
    patch: dict,
    unknown_fields: str = "reject",
) -> OrderRead:
    """
    Частичное обновление шапки заказа.
    Поддерживаемые поля: UPDATABLE_ORDER_FIELDS. Позиции не трогаются,
    total_amount с суммой позиций не сверяется.
    """
    values = _parse_update(order_id, patch, unknown_fields)

    async with transaction(db, f"update order {order_id}"):
        try:
            order = await update_by_id(db, Order, order_id, values, context=f"update order {order_id}")
        except InvalidReferenceError as exc:
            raise InvalidReferenceError(f"Restaurant not found: {values.get('restaurant_id')}") from exc
        if order is None:
            raise NotFoundError("Order not found")

    logger.info("Order %s updated: %s", order_id, sorted(values))
    return OrderRead.model_validate(order)


async def set_status(db: AsyncSession, order_id: UUID, status: Optional[str]) -> OrderRead:
    """
    Меняет только статус. Переходы не ограничены, любой статус из списка.
    """
    if not status:
        raise ValidationError("Status is required")
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise ValidationError(f"Invalid status: {status}")

    async with transaction(db, f"set status of order {order_id}"):
        order = await update_by_id(
            db, Order, order_id, {"status": status}, context=f"set status of order {order_id}"
        )
        if order is None:
            raise NotFoundError("Order not found")

    logger.info("Order %s status -> %s", order_id, status)
    return OrderRead.model_validate(order)


async def delete_order(db: AsyncSession, order_id: UUID) -> None:
    """
    Удаляет заказ, позиции удаляет БД (ON DELETE CASCADE).
    Если заказа нет, NotFoundError.
    """
    async with transaction(db, f"delete order {order_id}"):
        deleted = await delete_by_id(db, Order, order_id, context=f"delete order {order_id}")
        if not deleted:
            raise NotFoundError("Order not found")

    logger.info("Order %s deleted", order_id)
