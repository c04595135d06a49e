from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery_admin.crud.base import list_rows
from food_delivery_admin.models import MenuItem, Order, OrderItem, Restaurant


def _orders_with_restaurant_name():
    return select(Order, Restaurant.name.label("restaurant_name")).outerjoin(
        Restaurant, Restaurant.id == Order.restaurant_id
    )


async def get_orders(
    db: AsyncSession,
    status: Optional[str] = None,
    restaurant_id: Optional[UUID] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Tuple[Order, Optional[str]]]:
    """
    Возвращает список заказов вместе с названием ресторана.
    Сортируем по created_at (новые первыми).
    """
    rows = await list_rows(
        db,
        _orders_with_restaurant_name(),
        filters=[(Order.status, status), (Order.restaurant_id, restaurant_id)],
        order_by=[Order.created_at.desc()],
        limit=limit,
        offset=offset,
        context="list orders",
    )
    return [(row.Order, row.restaurant_name) for row in rows]


async def get_order_header(db: AsyncSession, order_id: UUID) -> Optional[Tuple[Order, Optional[str]]]:
    rows = await list_rows(
        db,
        _orders_with_restaurant_name(),
        filters=[(Order.id, order_id)],
        context=f"get order {order_id}",
    )
    if not rows:
        return None
    return rows[0].Order, rows[0].restaurant_name


async def get_order_items(db: AsyncSession, order_id: UUID) -> List[Tuple[OrderItem, Optional[str]]]:
    """
    Позиции заказа с названием блюда из меню.
    """
    stmt = select(OrderItem, MenuItem.name.label("menu_item_name")).outerjoin(
        MenuItem, MenuItem.id == OrderItem.menu_item_id
    )
    rows = await list_rows(
        db,
        stmt,
        filters=[(OrderItem.order_id, order_id)],
        context=f"get items of order {order_id}",
    )
    return [(row.OrderItem, row.menu_item_name) for row in rows]


async def get_order_status_rows(
    db: AsyncSession,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> list:
    """
    Проекция для статистики: status, total_amount, created_at по всем заказам.
    """
    stmt = select(Order.status, Order.total_amount, Order.created_at)
    if date_from:
        stmt = stmt.where(Order.created_at >= date_from)
    if date_to:
        stmt = stmt.where(Order.created_at <= date_to)
    return await list_rows(db, stmt, context="summarize orders")
