"""
Общий слой доступа к таблицам.

Функции не делают commit: границы транзакции задаёт сервис через transaction().
После каждой записи делается flush, чтобы нарушение ограничений БД
всплывало сразу в месте вызова, уже переведённым в ошибки из errors.py.
"""
import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import Select, delete
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery_admin.errors import (
    ConstraintViolationError,
    InvalidReferenceError,
    StorageUnavailableError,
    ValidationError,
)
from food_delivery_admin.models.common import utcnow

logger = logging.getLogger(__name__)

_SQLSTATE_KINDS = {
    "23503": "foreign_key",
    "23514": "check",
    "23502": "not_null",
    "23505": "unique",
}

# SQLite и часть драйверов не отдают SQLSTATE, остаётся текст ошибки
_MESSAGE_KINDS = (
    ("foreign key", "foreign_key"),
    ("check constraint", "check"),
    ("not-null", "not_null"),
    ("not null", "not_null"),
    ("unique", "unique"),
    ("duplicate key", "unique"),
)


def _integrity_kind(exc: IntegrityError) -> str:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[code]

    message = str(orig).lower()
    for needle, kind in _MESSAGE_KINDS:
        if needle in message:
            return kind
    return "other"


@contextmanager
def translate_errors(context: str):
    """
    Переводит исключения SQLAlchemy/драйвера в ошибки приложения.
    В сообщение попадает только контекст операции, текст драйвера пишется в лог.
    """
    try:
        yield
    except IntegrityError as exc:
        kind = _integrity_kind(exc)
        logger.warning("%s: integrity error (%s): %s", context, kind, exc.orig)
        if kind == "foreign_key":
            raise InvalidReferenceError(f"{context}: referenced record does not exist") from exc
        if kind in ("check", "not_null"):
            raise ValidationError(f"{context}: invalid or missing field value") from exc
        raise ConstraintViolationError(f"{context}: conflicts with existing data") from exc
    except (OperationalError, InterfaceError, OSError, asyncio.TimeoutError) as exc:
        logger.warning("%s: storage unavailable: %s", context, exc)
        raise StorageUnavailableError(f"{context}: database is unavailable") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            logger.warning("%s: connection invalidated: %s", context, exc)
            raise StorageUnavailableError(f"{context}: database is unavailable") from exc
        raise


@asynccontextmanager
async def transaction(db: AsyncSession, context: str):
    """
    begin → ... → commit, при любой ошибке rollback.
    Пример: async with transaction(db, "create order"): ...
    """
    with translate_errors(context):
        async with db.begin():
            yield db


async def insert_one(db: AsyncSession, model, values: dict, context: Optional[str] = None):
    obj = model(**values)
    with translate_errors(context or f"insert {model.__tablename__}"):
        db.add(obj)
        await db.flush()
    return obj


async def insert_many(db: AsyncSession, model, rows: Iterable[dict], context: Optional[str] = None) -> list:
    objs = [model(**row) for row in rows]
    if not objs:
        return objs
    with translate_errors(context or f"insert {model.__tablename__}"):
        db.add_all(objs)
        await db.flush()
    return objs


async def get_by_id(db: AsyncSession, model, obj_id, context: Optional[str] = None):
    with translate_errors(context or f"get {model.__tablename__}"):
        return await db.get(model, obj_id)


async def list_rows(
    db: AsyncSession,
    stmt: Select,
    filters: Sequence[Tuple[Any, Any]] = (),
    order_by: Sequence[Any] = (),
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    context: str = "list rows",
) -> List[Any]:
    """
    Выполняет select с фильтрами вида [(колонка, значение), ...].
    Фильтры со значением None пропускаются.
    """
    for column, value in filters:
        if value is not None:
            stmt = stmt.where(column == value)
    if order_by:
        stmt = stmt.order_by(*order_by)
    if limit is not None:
        stmt = stmt.limit(limit)
    if offset:
        stmt = stmt.offset(offset)

    with translate_errors(context):
        result = await db.execute(stmt)
        return list(result.all())


async def update_by_id(db: AsyncSession, model, obj_id, patch: dict, context: Optional[str] = None):
    context = context or f"update {model.__tablename__}"
    with translate_errors(context):
        obj = await db.get(model, obj_id)
        if obj is None:
            return None

        for key, value in patch.items():
            setattr(obj, key, value)
        if hasattr(model, "updated_at"):
            obj.updated_at = utcnow()

        await db.flush()
    return obj


async def delete_by_id(db: AsyncSession, model, obj_id, context: Optional[str] = None) -> int:
    with translate_errors(context or f"delete {model.__tablename__}"):
        stmt = delete(model).where(model.id == obj_id).execution_options(synchronize_session="evaluate")
        result = await db.execute(stmt)
    return result.rowcount
