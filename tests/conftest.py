from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select, update

from food_delivery_admin.config import Settings
from food_delivery_admin.db.session import Database
from food_delivery_admin.main import create_app
from food_delivery_admin.models import MenuItem, Order, Restaurant
from food_delivery_admin.schemas.order import OrderCreate


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as s:
        yield s


@pytest.fixture
async def restaurant(database):
    async with database.session_factory() as s, s.begin():
        obj = Restaurant(
            name="Pizza Place",
            address="1 Main St",
            phone="+1 555 0100",
            cuisine_type="Italian",
        )
        s.add(obj)
    return obj


@pytest.fixture
async def menu_items(database, restaurant):
    async with database.session_factory() as s, s.begin():
        pizza = MenuItem(restaurant_id=restaurant.id, name="Margherita", price=Decimal("12.50"), category="pizza")
        cola = MenuItem(restaurant_id=restaurant.id, name="Cola", price=Decimal("2.00"), category="drinks")
        s.add_all([pizza, cola])
    return {"pizza": pizza, "cola": cola}


@pytest.fixture
def make_order(restaurant):
    def _make(items=(), **overrides):
        data = {
            "restaurant_id": restaurant.id,
            "customer_name": "Jane Doe",
            "customer_phone": "+1 555 0199",
            "customer_address": "42 Elm St",
            "total_amount": Decimal("27.00"),
            "items": list(items),
        }
        data.update(overrides)
        return OrderCreate(**data)

    return _make


@pytest.fixture
def count_rows(database):
    async def _count(model, **filters):
        async with database.session_factory() as s:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return (await s.execute(stmt)).scalar_one()

    return _count


@pytest.fixture
def set_created_at(database):
    async def _set(order_id, created_at):
        async with database.session_factory() as s, s.begin():
            await s.execute(update(Order).where(Order.id == order_id).values(created_at=created_at))

    return _set


@pytest.fixture
async def client(database):
    app = create_app(Settings(DATABASE_URL=database.url), database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
