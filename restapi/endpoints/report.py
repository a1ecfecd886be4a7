"""Report endpoints for the API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.report import schemas
from components.report.repository import ReportRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


@router.get("/payments", response_model=schemas.PaymentsReport)
async def payments_report(
    year: int = Query(..., description="Year to report"),
    month: int = Query(..., ge=1, le=12, description="Month to report"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Payments collected in a month.

    Returns every payment dated in the month and the total collected.
    Payments with unreadable dates are counted in ``skipped_records``.
    """
    return await ReportRepository(db).payments_report(year, month)


@router.get("/unpaid", response_model=schemas.UnpaidReport)
async def unpaid_report(
    year: int = Query(..., description="Year to report"),
    month: int = Query(..., ge=1, le=12, description="Month to report"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Pending and overdue installments due in a month."""
    return await ReportRepository(db).unpaid_report(year, month)


@router.get("/dashboard", response_model=schemas.DashboardSummary)
async def dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ReportRepository(db).dashboard_summary()
