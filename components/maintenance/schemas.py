"""Pydantic schemas for maintenance utilities."""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field


class MaintenanceReport(BaseModel):
    """Outcome of a maintenance run: how many records changed and why."""
    count: int = 0
    message: str = ""
    logs: List[str] = Field(default_factory=list)


class SweepRequest(BaseModel):
    reference_date: Optional[date] = None


class OverdueRangeRequest(BaseModel):
    start_year: Optional[int] = None
    start_month: Optional[int] = Field(None, ge=1, le=12)
    end_year: Optional[int] = None
    end_month: Optional[int] = Field(None, ge=1, le=12)


class CloseMonthRequest(BaseModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    keep_installment_ids: List[str] = Field(default_factory=list)


class RevertPaymentRequest(BaseModel):
    payment_id: str
