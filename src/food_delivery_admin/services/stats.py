from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery_admin.crud.base import transaction
from food_delivery_admin.crud.order import get_order_status_rows
from food_delivery_admin.errors import ValidationError
from food_delivery_admin.models import OrderStatusEnum
from food_delivery_admin.schemas.order import OrderStats


async def summarize(
    db: AsyncSession,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> OrderStats:
    """
    Общая статистика по заказам:
    - количество заказов всего и по каждому статусу
    - выручка (total_revenue) только по доставленным заказам
    По умолчанию без ограничения по датам.
    """
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be later than date_to")

    async with transaction(db, "summarize orders"):
        rows = await get_order_status_rows(db, date_from=date_from, date_to=date_to)

    counts = {status.value: 0 for status in OrderStatusEnum}
    total_revenue = Decimal("0")
    for row in rows:
        if row.status in counts:
            counts[row.status] += 1
        if row.status == OrderStatusEnum.delivered.value:
            # сумма только в Decimal, без float
            total_revenue += Decimal(str(row.total_amount or 0))

    return OrderStats(
        total_orders=len(rows),
        total_revenue=total_revenue.quantize(Decimal("0.01")),
        **counts,
    )
