from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery_admin.config import Settings
from food_delivery_admin.db.deps import get_async_session, get_settings
from food_delivery_admin.schemas.envelope import Envelope, MessageEnvelope
from food_delivery_admin.schemas.order import (
    OrderCreate,
    OrderDetail,
    OrderListItem,
    OrderRead,
    OrderStats,
    StatusUpdate,
)
from food_delivery_admin.services import orders as order_service
from food_delivery_admin.services.stats import summarize


router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/stats/summary", response_model=Envelope[OrderStats])
async def get_orders_summary_endpoint(
    date_from: Optional[datetime] = Query(None, description="Начальная дата (ISO)"),
    date_to: Optional[datetime] = Query(None, description="Конечная дата (ISO)"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Общая статистика по заказам:
    - total_orders и количество по каждому статусу
    - total_revenue только по доставленным заказам
    """
    return Envelope(data=await summarize(db, date_from=date_from, date_to=date_to))


@router.get("", response_model=Envelope[List[OrderListItem]])
async def list_orders(
    status: Optional[str] = Query(None, description="Фильтр по статусу"),
    restaurant_id: Optional[UUID] = Query(None, description="Фильтр по ресторану"),
    limit: Optional[int] = Query(None, ge=1, description="Количество записей для вывода"),
    offset: Optional[int] = Query(None, ge=0, description="Смещение для пагинации"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает список заказов, новые первыми.
    Без limit отдаёт все заказы.
    """
    orders = await order_service.list_orders(
        db, status=status, restaurant_id=restaurant_id, limit=limit, offset=offset
    )
    return Envelope(data=orders)


@router.get("/{order_id}", response_model=Envelope[OrderDetail])
async def get_order(
    order_id: UUID = Path(..., description="ID заказа"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает детализацию заказа по id вместе с позициями.
    """
    return Envelope(data=await order_service.get_order(db, order_id))


@router.post("", response_model=Envelope[OrderRead], status_code=http_status.HTTP_201_CREATED)
async def create_order_endpoint(order_in: OrderCreate, db: AsyncSession = Depends(get_async_session)):
    """
    Создаёт заказ с позициями, возвращает шапку заказа.
    """
    return Envelope(data=await order_service.create_order(db, order_in))


@router.put("/{order_id}", response_model=Envelope[OrderRead])
async def update_order_endpoint(
    order_id: UUID,
    patch: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """
    Частичное обновление шапки заказа.
    """
    order = await order_service.update_order(
        db, order_id, patch, unknown_fields=settings.ORDER_UPDATE_UNKNOWN_FIELDS
    )
    return Envelope(data=order)


@router.patch("/{order_id}/status", response_model=Envelope[OrderRead])
async def set_order_status_endpoint(
    order_id: UUID,
    payload: Optional[StatusUpdate] = Body(None),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Меняет статус заказа: pending, preparing, delivered, cancelled.
    """
    status = payload.status if payload else None
    return Envelope(data=await order_service.set_status(db, order_id, status))


@router.delete("/{order_id}", response_model=MessageEnvelope)
async def remove_order(order_id: UUID, db: AsyncSession = Depends(get_async_session)):
    """
    Удаляет заказ вместе с позициями.
    """
    await order_service.delete_order(db, order_id)
    return MessageEnvelope(message="Order deleted successfully")
