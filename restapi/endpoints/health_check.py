"""Health check endpoint for monitoring application status."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core import schemas
from components.core.init_db import get_db
from components.core.logging import get_logger

router = APIRouter(
    prefix="/health_check",
    tags=["services"],
    responses={200: {"description": "Service is healthy"}},
)
logger = get_logger(__name__)


@router.get("/", response_model=schemas.HealthCheck)
async def health_check(db: AsyncSession = Depends(get_db)) -> schemas.HealthCheck:
    """Report service status and whether the database answers."""
    try:
        await db.execute(text("SELECT 1"))
        database = "reachable"
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        database = "unreachable"
    return schemas.HealthCheck(
        service_name="Loan Back Office",
        status="healthy" if database == "reachable" else "degraded",
        database=database,
    )
