"""Pydantic schemas for receipts."""

from typing import Any, Dict, Optional
from pydantic import BaseModel

from components.receipt.models import ReceiptType


class Receipt(BaseModel):
    """Schema for receipt response."""
    id: str
    type: ReceiptType
    partner_id: str
    loan_id: str
    payment_id: Optional[str] = None
    installment_id: Optional[str] = None
    generation_date: str
    amount: float
    partner_name: str
    partner_identification: str
    details: Dict[str, Any]

    class Config:
        from_attributes = True
