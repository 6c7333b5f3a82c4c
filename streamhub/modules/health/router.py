import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.config import settings
from streamhub.core.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
def health_check() -> Any:
    return {"status": "UP", "service": settings.PROJECT_NAME, "version": settings.VERSION}

@router.get("/health/live")
def liveness() -> Any:
    return {"status": "UP"}

@router.get("/health/ready")
async def readiness(db: AsyncSession = Depends(get_db)) -> Any:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"[Health] Database not reachable: {e}")
        return JSONResponse(status_code=503, content={"status": "NOT_READY", "database": "DOWN"})
    return {"status": "READY", "database": "UP"}
