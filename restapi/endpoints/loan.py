"""Loan endpoints for the API."""

import io
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.imports import schemas as import_schemas
from components.imports.repository import ImportRepository
from components.loan import schemas
from components.loan.models import LoanStatus
from components.loan.repository import LoanRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/loans",
    tags=["loans"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Loan])
async def list_loans(
    partner_id: Optional[str] = Query(None),
    loan_status: Optional[LoanStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List loans, newest first."""
    return await LoanRepository(db).get_all(partner_id=partner_id, status=loan_status)


@router.post("/", response_model=schemas.LoanDetail, status_code=status.HTTP_201_CREATED)
async def create_loan(
    loan: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Grant a loan to a partner.

    The installment plan and the loan grant receipt are created with the
    loan. Standard loans charge ``interest_rate`` percent of the remaining
    capital each month; custom loans charge ``fixed_interest_amount`` on
    every installment.
    """
    repo = LoanRepository(db)
    db_loan = await repo.create(loan)
    return _detail(db_loan, await repo.get_installments(db_loan.id))


@router.post("/import", response_model=import_schemas.ImportResponse)
async def import_loans(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Import loans from a .csv or .xlsx file.

    Columns: ``Socio`` (partner full name), ``Monto``, ``Cuotas`` and
    ``Interes`` are required; ``Tipo`` and ``Fecha`` (dd/mm/yyyy) are optional.
    """
    file_content = await file.read()
    return await ImportRepository(db).import_loans(io.BytesIO(file_content), file.filename or "")


@router.get("/{loan_id}", response_model=schemas.LoanDetail)
async def get_loan(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a loan with its installment plan."""
    repo = LoanRepository(db)
    db_loan = await repo.get_or_raise(loan_id)
    return _detail(db_loan, await repo.get_installments(loan_id))


def _detail(db_loan, installments) -> schemas.LoanDetail:
    return schemas.LoanDetail(
        **schemas.Loan.model_validate(db_loan).model_dump(),
        installments=[schemas.Installment.model_validate(i) for i in installments],
    )
