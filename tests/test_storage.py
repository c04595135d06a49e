import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from food_delivery_admin.crud.base import (
    delete_by_id,
    get_by_id,
    insert_many,
    insert_one,
    list_rows,
    transaction,
    translate_errors,
    update_by_id,
)
from food_delivery_admin.errors import (
    ConstraintViolationError,
    InvalidReferenceError,
    StorageUnavailableError,
    ValidationError,
)
from food_delivery_admin.models import MenuItem, Order, OrderItem


def order_row(restaurant_id, **overrides):
    row = {
        "restaurant_id": restaurant_id,
        "customer_name": "John",
        "customer_phone": "555",
        "customer_address": "Somewhere 1",
        "total_amount": Decimal("15.00"),
    }
    row.update(overrides)
    return row


@pytest.mark.asyncio
async def test_insert_get_update_delete(session, restaurant):
    async with transaction(session, "test"):
        order = await insert_one(session, Order, order_row(restaurant.id))
    assert order.id is not None
    assert order.status == "pending"
    assert order.payment_method == "cash"

    async with transaction(session, "test"):
        fetched = await get_by_id(session, Order, order.id)
        assert fetched.customer_name == "John"
        updated = await update_by_id(session, Order, order.id, {"notes": "no onions"})
    assert updated.notes == "no onions"

    async with transaction(session, "test"):
        assert await delete_by_id(session, Order, order.id) == 1
        assert await delete_by_id(session, Order, order.id) == 0
        assert await get_by_id(session, Order, order.id) is None


@pytest.mark.asyncio
async def test_update_missing_row_returns_none(session):
    async with transaction(session, "test"):
        assert await update_by_id(session, Order, uuid.uuid4(), {"notes": "x"}) is None


@pytest.mark.asyncio
async def test_insert_many_computes_subtotal(session, restaurant, menu_items):
    async with transaction(session, "test"):
        order = await insert_one(session, Order, order_row(restaurant.id))
        items = await insert_many(
            session,
            OrderItem,
            [
                {"order_id": order.id, "menu_item_id": menu_items["pizza"].id, "quantity": 3, "price": Decimal("12.50")},
                {"order_id": order.id, "menu_item_id": menu_items["cola"].id, "quantity": 2, "price": Decimal("2.00")},
            ],
        )

    assert sorted(item.subtotal for item in items) == [Decimal("4.00"), Decimal("37.50")]


@pytest.mark.asyncio
async def test_insert_many_with_no_rows(session):
    assert await insert_many(session, OrderItem, []) == []


@pytest.mark.asyncio
async def test_list_rows_skips_empty_filters(session, restaurant):
    async with transaction(session, "test"):
        await insert_one(session, Order, order_row(restaurant.id, status="delivered"))
        await insert_one(session, Order, order_row(restaurant.id))

        all_rows = await list_rows(session, select(Order), filters=[(Order.status, None)])
        delivered = await list_rows(session, select(Order), filters=[(Order.status, "delivered")])

    assert len(all_rows) == 2
    assert [row.Order.status for row in delivered] == ["delivered"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "shipped"},
        {"payment_method": "barter"},
        {"payment_status": "unknown"},
        {"total_amount": Decimal("-1.00")},
        {"delivery_fee": Decimal("-0.01")},
        {"customer_name": ""},
        {"customer_phone": None},
    ],
)
async def test_column_constraints_raise_validation_error(session, restaurant, overrides):
    with pytest.raises(ValidationError):
        async with transaction(session, "create order"):
            await insert_one(session, Order, order_row(restaurant.id, **overrides))


@pytest.mark.asyncio
async def test_dangling_reference_raises_invalid_reference(session):
    with pytest.raises(InvalidReferenceError) as exc_info:
        async with transaction(session, "create order"):
            await insert_one(session, Order, order_row(uuid.uuid4()), context="create order")

    # текст драйвера в сообщение не попадает
    assert exc_info.value.message == "create order: referenced record does not exist"


@pytest.mark.asyncio
async def test_menu_item_delete_restricted_while_ordered(session, restaurant, menu_items):
    async with transaction(session, "test"):
        order = await insert_one(session, Order, order_row(restaurant.id))
        await insert_one(
            session,
            OrderItem,
            {"order_id": order.id, "menu_item_id": menu_items["cola"].id, "quantity": 1, "price": Decimal("2.00")},
        )

    with pytest.raises(InvalidReferenceError):
        async with transaction(session, "delete menu item"):
            await delete_by_id(session, MenuItem, menu_items["cola"].id)


def test_translate_errors_maps_connection_failures():
    with pytest.raises(StorageUnavailableError) as exc_info:
        with translate_errors("list orders"):
            raise OperationalError("SELECT 1", {}, Exception("could not connect to db-host:5432"))

    assert "db-host" not in exc_info.value.message
    assert exc_info.value.message == "list orders: database is unavailable"


def test_translate_errors_maps_unique_violation():
    with pytest.raises(ConstraintViolationError):
        with translate_errors("insert restaurant"):
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: restaurants.email"))


def test_translate_errors_prefers_sqlstate():
    class PgError(Exception):
        sqlstate = "23503"

    with pytest.raises(InvalidReferenceError):
        with translate_errors("update order"):
            raise IntegrityError("UPDATE", {}, PgError("some driver text"))
