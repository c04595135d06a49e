import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from food_delivery_admin.api import health
from food_delivery_admin.api.routes.orders import router as orders_router
from food_delivery_admin.config import Settings, settings as default_settings
from food_delivery_admin.db.session import Database
from food_delivery_admin.errors import AppError, format_validation_errors
from food_delivery_admin.schemas.envelope import ErrorEnvelope

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorEnvelope(error=message).model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, format_validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        # в ответ не отдаём ни traceback, ни текст исключения
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, "Internal server error")


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Application started")
        await database.connect(create_tables=settings.DB_CREATE_TABLES)
        yield
        await database.dispose()
        logger.info("🛑 Application stopped")

    app = FastAPI(title="Food Delivery Admin API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    register_exception_handlers(app)

    # Подключаем роуты
    app.include_router(health.router)
    app.include_router(orders_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "message": "Food Delivery Admin Panel API",
            "version": "1.0.0",
            "endpoints": {"orders": "/api/orders", "stats": "/api/orders/stats/summary"},
        }

    return app


logging.basicConfig(level=default_settings.LOG_LEVEL)

app = create_app()
