import enum
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_check(column: str, values: type[enum.Enum]) -> str:
    """SQL-условие для CHECK: column IN ('a', 'b', ...)."""
    allowed = ", ".join(f"'{member.value}'" for member in values)
    return f"{column} IN ({allowed})"
