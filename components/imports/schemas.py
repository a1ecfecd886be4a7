"""Pydantic schemas for spreadsheet imports."""

from typing import List, Optional
from pydantic import BaseModel


class ImportRowError(BaseModel):
    """Schema for a rejected spreadsheet row."""
    row: int
    message: str


class ImportResponse(BaseModel):
    """Schema for spreadsheet import response."""
    success: bool
    message: str
    imported: int = 0
    errors: Optional[List[ImportRowError]] = None
