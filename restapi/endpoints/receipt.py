"""Receipt endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.receipt import schemas
from components.receipt.repository import ReceiptRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/receipts",
    tags=["receipts"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Receipt])
async def list_receipts(
    search: Optional[str] = Query(None, description="Partner name, identification number or receipt id"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List receipts, newest first."""
    return await ReceiptRepository(db).get_all(search)


@router.get("/{receipt_id}", response_model=schemas.Receipt)
async def get_receipt(
    receipt_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ReceiptRepository(db).get_or_raise(receipt_id)
