from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from food_delivery_admin.db.deps import get_database
from food_delivery_admin.db.session import Database
from food_delivery_admin.crud.base import translate_errors
from food_delivery_admin.errors import StorageUnavailableError

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check(database: Database = Depends(get_database)):
    """
    Health-check с проверкой соединения с БД (SELECT 1).
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        with translate_errors("health check"):
            await database.ping()
    except StorageUnavailableError:
        return JSONResponse(status_code=503, content={"status": "unavailable", "timestamp": timestamp})

    return {"status": "ok", "timestamp": timestamp}
