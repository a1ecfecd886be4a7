"""Maintenance endpoints: overdue sweeps, payment reversal and data repair."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.maintenance import schemas
from components.maintenance.repair import DataRepair
from components.maintenance.reversal import PaymentReversal
from components.maintenance.sweeper import OverdueSweeper
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/maintenance",
    tags=["maintenance"],
)


@router.post("/sweep", response_model=schemas.MaintenanceReport)
async def sweep_overdue(
    body: schemas.SweepRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark pending installments due before the reference date (default today) as overdue."""
    return await OverdueSweeper(db).sweep(body.reference_date)


@router.post("/revert-overdue", response_model=schemas.MaintenanceReport)
async def revert_overdue(
    body: schemas.OverdueRangeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Put overdue installments back to pending, optionally within a month range."""
    start = (body.start_year, body.start_month) if body.start_year and body.start_month else None
    end = (body.end_year, body.end_month) if body.end_year and body.end_month else None
    return await OverdueSweeper(db).revert_overdue(start, end)


@router.post("/close-month", response_model=schemas.MaintenanceReport)
async def close_month(
    body: schemas.CloseMonthRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark the month's unpaid installments overdue, except the ones listed to keep."""
    return await OverdueSweeper(db).close_month(body.year, body.month, body.keep_installment_ids)


@router.post("/revert-payment", response_model=schemas.MaintenanceReport)
async def revert_payment(
    body: schemas.RevertPaymentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a payment and restore its installments and loan."""
    return await PaymentReversal(db).revert_payment(body.payment_id)


@router.post("/repair-payments", response_model=schemas.MaintenanceReport)
async def repair_payments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Convert legacy payment dates and fill in missing capital and interest amounts."""
    return await DataRepair(db).repair_payments()


@router.post("/repair-installment-dates", response_model=schemas.MaintenanceReport)
async def repair_installment_dates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await DataRepair(db).repair_installment_dates()


@router.post("/clean-orphans", response_model=schemas.MaintenanceReport)
async def clean_orphan_installments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete installments whose partner no longer exists."""
    return await DataRepair(db).clean_orphan_installments()


@router.post("/generate-receipts", response_model=schemas.MaintenanceReport)
async def generate_missing_receipts(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Issue receipts for paid installments that never got one."""
    return await DataRepair(db).generate_missing_receipts()
