from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db import get_db
from ..logging_config import logger

health_router = APIRouter(tags=["Health"])


@health_router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness probe: the service is up and its database answers.
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service is not ready: {str(e)}",
        )
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "database": "ok",
    }
