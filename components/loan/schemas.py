"""Pydantic schemas for loan and installment data validation."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from components.loan.models import LoanStatus, LoanType, InstallmentStatus


class LoanCreate(BaseModel):
    """Schema for loan origination."""
    partner_id: str
    loan_type: LoanType = LoanType.STANDARD
    total_amount: Decimal = Field(..., gt=0)
    number_of_installments: int = Field(0, ge=0)
    interest_rate: Decimal = Field(Decimal("0"), ge=0)
    fixed_interest_amount: Optional[Decimal] = Field(None, ge=0)
    start_date: datetime

    @model_validator(mode="after")
    def check_terms(self) -> "LoanCreate":
        if self.loan_type == LoanType.STANDARD and self.number_of_installments < 1:
            raise ValueError("A standard loan needs at least one installment")
        return self

    @property
    def interest_parameter(self) -> Decimal:
        """Rate for standard loans, fixed amount per installment for custom ones."""
        if self.loan_type == LoanType.STANDARD:
            return self.interest_rate
        return self.fixed_interest_amount or Decimal("0")


class Loan(BaseModel):
    """Schema for loan response."""
    id: str
    partner_id: str
    partner_name: str
    loan_type: LoanType
    total_amount: float
    start_date: str
    number_of_installments: int
    interest_rate: float
    fixed_interest_amount: Optional[float] = None
    status: LoanStatus

    class Config:
        from_attributes = True


class Installment(BaseModel):
    """Schema for installment response."""
    id: str
    loan_id: str
    partner_id: str
    installment_number: int
    due_date: str
    status: InstallmentStatus
    capital_amount: float
    interest_amount: float
    total_amount: float
    payment_date: Optional[str] = None
    payment_id: Optional[str] = None
    receipt_id: Optional[str] = None

    class Config:
        from_attributes = True


class LoanDetail(Loan):
    """Loan with its installment plan."""
    installments: List[Installment]
