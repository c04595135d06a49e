"""
Ошибки прикладного уровня.
Каждый класс знает свой HTTP-статус, обработчики в main.py
превращают их в конверт {"success": false, "error": ...}.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class InvalidReferenceError(AppError):
    """Ссылка на несуществующий ресторан или позицию меню."""

    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConstraintViolationError(AppError):
    status_code = 409


class StorageUnavailableError(AppError):
    status_code = 503


def format_validation_errors(errors) -> str:
    """Список ошибок pydantic → одна строка для поля "error"."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or "Invalid request"
