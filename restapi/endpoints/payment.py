"""Payment endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.payment import schemas
from components.payment.repository import PaymentRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Payment])
async def list_payments(
    loan_id: Optional[str] = Query(None),
    partner_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List payments, most recent first."""
    return await PaymentRepository(db).get_all(loan_id=loan_id, partner_id=partner_id)


@router.post("/installments", response_model=schemas.Payment, status_code=status.HTTP_201_CREATED)
async def pay_installments(
    body: schemas.InstallmentPaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Pay selected installments of one loan.

    A single payment covers all of them and one receipt is issued per
    installment. The loan is finished once every installment is paid.
    """
    return await PaymentRepository(db).pay_installments(
        body.loan_id, body.installment_ids, body.payment_date,
    )


@router.post("/contribution", response_model=schemas.Payment, status_code=status.HTTP_201_CREATED)
async def register_contribution(
    body: schemas.ContributionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Take a free-form amount off the loan balance. Overpayment is rejected."""
    return await PaymentRepository(db).register_contribution(
        body.loan_id, body.partner_id, body.amount, body.payment_date,
    )


@router.post("/bulk", response_model=List[schemas.Payment], status_code=status.HTTP_201_CREATED)
async def pay_in_bulk(
    body: schemas.BulkPaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Mark many installments paid with one payment each.

    When ``year`` and ``month`` are given every payment is dated inside that
    month; otherwise payments are dated now.
    """
    if (body.year is None) != (body.month is None):
        raise HTTPException(status_code=400, detail="Provide both year and month, or neither")
    period = (body.year, body.month) if body.year is not None else None
    return await PaymentRepository(db).pay_in_bulk(body.installment_ids, period)


@router.get("/period", response_model=schemas.PeriodInstallments)
async def installments_for_period(
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Unpaid installments due in a month, plus the ones already overdue."""
    return await PaymentRepository(db).installments_for_period(year, month)


@router.put("/date", response_model=schemas.Payment)
async def update_payment_date(
    body: schemas.PaymentDateUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Correct the date of a payment and of the installment it paid."""
    return await PaymentRepository(db).update_payment_date(
        body.payment_id, body.installment_id, body.payment_date,
    )


@router.get("/{payment_id}", response_model=schemas.Payment)
async def get_payment(
    payment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await PaymentRepository(db).get_or_raise(payment_id)
