"""Partner endpoints for the API."""

import io
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.imports import schemas as import_schemas
from components.imports.repository import ImportRepository
from components.partner import schemas
from components.partner.repository import PartnerRepository
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/partners",
    tags=["partners"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Partner])
async def list_partners(
    search: Optional[str] = Query(None, description="Part of a name, alias or identification number"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List partners sorted by last name."""
    return await PartnerRepository(db).get_all(search)


@router.post("/", response_model=schemas.Partner, status_code=status.HTTP_201_CREATED)
async def create_partner(
    partner: schemas.PartnerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Register a partner."""
    return await PartnerRepository(db).create(partner)


@router.post("/import", response_model=import_schemas.ImportResponse)
async def import_partners(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Import partners from a .csv or .xlsx file.

    Columns: ``Name`` (or ``Nombre``) and ``Apellido`` are required,
    ``Cedula`` and ``Alias`` are optional. Invalid rows are reported with
    their spreadsheet row number; valid rows are imported regardless.
    """
    file_content = await file.read()
    return await ImportRepository(db).import_partners(io.BytesIO(file_content), file.filename or "")


@router.get("/{partner_id}", response_model=schemas.Partner)
async def get_partner(
    partner_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await PartnerRepository(db).get_or_raise(partner_id)


@router.put("/{partner_id}", response_model=schemas.Partner)
async def update_partner(
    partner_id: str,
    partner: schemas.PartnerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update partner details. Omitted fields are left unchanged."""
    return await PartnerRepository(db).update(partner_id, partner)


@router.delete("/{partner_id}", response_model=schemas.PartnerDeleted)
async def delete_partner(
    partner_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a partner with all of their loans and installments."""
    return await PartnerRepository(db).delete(partner_id)
