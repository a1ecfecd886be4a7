"""Pydantic schemas for payment data validation."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from components.loan.schemas import Installment
from components.payment.models import PaymentType


class InstallmentPaymentCreate(BaseModel):
    """Schema for paying specific installments of one loan."""
    loan_id: str
    installment_ids: List[str] = Field(..., min_length=1)
    payment_date: datetime


class ContributionCreate(BaseModel):
    """Schema for a free-form contribution that lowers the loan balance."""
    loan_id: str
    partner_id: str
    amount: Decimal = Field(..., gt=0)
    payment_date: datetime


class BulkPaymentCreate(BaseModel):
    """Schema for marking many installments paid at once."""
    installment_ids: List[str] = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1900, le=9999)
    month: Optional[int] = Field(None, ge=1, le=12)


class PaymentDateUpdate(BaseModel):
    """Schema for correcting the date of a recorded payment."""
    payment_id: str
    installment_id: str
    payment_date: datetime


class Payment(BaseModel):
    """Schema for payment response."""
    id: str
    partner_id: str
    loan_id: Optional[str] = None
    installment_ids: List[str]
    payment_date: str
    total_amount: Optional[float] = None
    capital_amount: Optional[float] = None
    interest_amount: Optional[float] = None
    partner_name: str
    type: PaymentType

    class Config:
        from_attributes = True


class PeriodInstallments(BaseModel):
    """Installments offered for bulk payment in a given month."""
    year: int
    month: int
    current: List[Installment]
    overdue: List[Installment]
