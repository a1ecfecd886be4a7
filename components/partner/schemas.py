"""Pydantic schemas for partner data validation."""

from typing import Optional
from pydantic import BaseModel, Field


class PartnerBase(BaseModel):
    """Base partner schema."""
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    identification_number: str = ""
    alias: str = ""


class PartnerCreate(PartnerBase):
    """Schema for partner registration."""
    pass


class PartnerUpdate(BaseModel):
    """Schema for partner update; omitted fields are left unchanged."""
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    identification_number: Optional[str] = None
    alias: Optional[str] = None


class Partner(PartnerBase):
    """Schema for partner response."""
    id: str

    class Config:
        from_attributes = True


class PartnerDeleted(BaseModel):
    partner_id: str
    loans_deleted: int
    installments_deleted: int
