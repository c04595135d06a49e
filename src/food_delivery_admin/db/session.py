import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from food_delivery_admin.config import Settings
from food_delivery_admin.db.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite по умолчанию не проверяет внешние ключи и не делает каскад
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Подключение к БД на весь процесс.
    Создаётся в create_app(), живёт в app.state.database,
    закрывается в lifespan при остановке.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        # Асинхронный движок
        self.engine = create_async_engine(url, echo=echo, future=True)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # Фабрика сессий
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DB_ECHO)

    async def create_all(self) -> None:
        # импорт регистрирует таблицы в Base.metadata
        from food_delivery_admin import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def connect(self, create_tables: bool = False) -> None:
        if create_tables:
            await self.create_all()
        await self.ping()
        logger.info("Database connected (%s)", self.engine.dialect.name)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")
