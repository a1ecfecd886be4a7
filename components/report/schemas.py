"""Pydantic schemas for reports."""

from typing import List
from pydantic import BaseModel

from components.loan.schemas import Installment
from components.payment.schemas import Payment


class PaymentsReport(BaseModel):
    """Schema for payments collected in a month."""
    year: int
    month: int
    payments: List[Payment]
    total_collected: float
    skipped_records: int = 0


class UnpaidReport(BaseModel):
    """Schema for installments still owed in a month."""
    year: int
    month: int
    installments: List[Installment]
    total_receivable: float
    skipped_records: int = 0


class DashboardSummary(BaseModel):
    """Schema for the dashboard figures."""
    outstanding_balance: float
    interest_collected: float
    partners: int
    active_loans: int
