"""Repository for importing partners and loans from spreadsheets."""

import io
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import BinaryIO, Dict, List, Optional

import pandas as pd
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import parse_iso, parse_legacy_date, utc_now
from components.core.errors import LoanOfficeError
from components.core.logging import get_logger
from components.imports import schemas
from components.loan.models import LoanType
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.partner.repository import PartnerRepository
from components.partner.schemas import PartnerCreate

logger = get_logger(__name__)

PARTNER_FIRST_NAME_COLUMNS = ("Name", "Nombre")
PARTNER_LAST_NAME_COLUMN = "Apellido"
LOAN_COLUMNS = ("Socio", "Monto", "Cuotas", "Interes")


def read_spreadsheet(file_content: BinaryIO, filename: str) -> pd.DataFrame:
    """Load a .csv or .xlsx upload as text cells."""
    raw = file_content.read()
    name = filename.lower()
    if name.endswith(".csv"):
        frame = pd.read_csv(io.BytesIO(raw), dtype=str)
    elif name.endswith(".xlsx"):
        frame = pd.read_excel(io.BytesIO(raw), dtype=str, engine="openpyxl")
    else:
        raise ValueError("Only .csv and .xlsx files are supported")
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame.fillna("")


def _cell(row: Dict, column: str) -> str:
    return str(row.get(column, "")).strip()


def _parse_date(value: str) -> Optional[datetime]:
    if not value:
        return utc_now()
    parsed = parse_legacy_date(value)
    if parsed is not None:
        return parsed
    try:
        return parse_iso(value)
    except ValueError:
        return None


class ImportRepository:
    """Repository for spreadsheet imports."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.partners = PartnerRepository(session)
        self.loans = LoanRepository(session)

    async def import_partners(self, file_content: BinaryIO, filename: str) -> schemas.ImportResponse:
        """
        Create one partner per row.

        Required columns: ``Name`` (or ``Nombre``) and ``Apellido``. Optional:
        ``Cedula`` and ``Alias``. Rows are never merged with existing partners.
        """
        try:
            frame = read_spreadsheet(file_content, filename)
        except ValueError as e:
            return schemas.ImportResponse(success=False, message=str(e))

        first_name_column = next((c for c in PARTNER_FIRST_NAME_COLUMNS if c in frame.columns), None)
        if first_name_column is None or PARTNER_LAST_NAME_COLUMN not in frame.columns:
            return schemas.ImportResponse(
                success=False,
                message="The file must contain 'Name' and 'Apellido' columns",
            )

        errors: List[schemas.ImportRowError] = []
        imported = 0
        for row_num, row in enumerate(frame.to_dict("records"), start=2):  # Row 1 is the header
            try:
                partner = PartnerCreate(
                    first_name=_cell(row, first_name_column),
                    last_name=_cell(row, PARTNER_LAST_NAME_COLUMN),
                    identification_number=_cell(row, "Cedula"),
                    alias=_cell(row, "Alias"),
                )
            except SchemaValidationError:
                errors.append(schemas.ImportRowError(
                    row=row_num, message="First and last name need at least 2 characters",
                ))
                continue
            await self.partners.create(partner)
            imported += 1

        logger.info("Partner import: %d imported, %d rejected", imported, len(errors))
        return self._response(imported, errors, "partner")

    async def import_loans(self, file_content: BinaryIO, filename: str) -> schemas.ImportResponse:
        """
        Grant one loan per row, matching the partner by exact "First Last" name.

        Required columns: ``Socio``, ``Monto``, ``Cuotas``, ``Interes``.
        Optional: ``Tipo`` (standard or custom) and ``Fecha`` (dd/mm/yyyy or
        ISO, defaults to today). Each loan is created with its schedule
        exactly as a manually granted loan.
        """
        try:
            frame = read_spreadsheet(file_content, filename)
        except ValueError as e:
            return schemas.ImportResponse(success=False, message=str(e))

        missing = [c for c in LOAN_COLUMNS if c not in frame.columns]
        if missing:
            return schemas.ImportResponse(
                success=False,
                message=f"The file is missing column(s): {', '.join(missing)}",
            )

        errors: List[schemas.ImportRowError] = []
        imported = 0
        for row_num, row in enumerate(frame.to_dict("records"), start=2):
            partner_name = _cell(row, "Socio")
            partner = await self.partners.find_by_full_name(partner_name)
            if partner is None:
                errors.append(schemas.ImportRowError(row=row_num, message=f"No partner named '{partner_name}'"))
                continue

            start_date = _parse_date(_cell(row, "Fecha"))
            if start_date is None:
                errors.append(schemas.ImportRowError(
                    row=row_num, message=f"Invalid date: {_cell(row, 'Fecha')}",
                ))
                continue

            try:
                amount = Decimal(_cell(row, "Monto").replace(",", ""))
                installments = int(float(_cell(row, "Cuotas") or 0))
                interest = Decimal(_cell(row, "Interes") or "0")
                loan_type = LoanType((_cell(row, "Tipo") or LoanType.STANDARD.value).lower())
                loan = LoanCreate(
                    partner_id=partner.id,
                    loan_type=loan_type,
                    total_amount=amount,
                    number_of_installments=installments,
                    interest_rate=interest if loan_type == LoanType.STANDARD else 0,
                    fixed_interest_amount=interest if loan_type == LoanType.CUSTOM else None,
                    start_date=start_date,
                )
                await self.loans.create(loan)
            except (InvalidOperation, ValueError, SchemaValidationError, LoanOfficeError) as e:
                errors.append(schemas.ImportRowError(row=row_num, message=f"Invalid loan data: {e}"))
                continue
            imported += 1

        logger.info("Loan import: %d imported, %d rejected", imported, len(errors))
        return self._response(imported, errors, "loan")

    @staticmethod
    def _response(imported: int, errors: List[schemas.ImportRowError], kind: str) -> schemas.ImportResponse:
        if errors and not imported:
            message = f"No {kind}s were imported"
        elif errors:
            message = f"{imported} {kind}(s) imported, {len(errors)} row(s) rejected"
        else:
            message = f"{imported} {kind}(s) imported"
        return schemas.ImportResponse(
            success=not errors,
            message=message,
            imported=imported,
            errors=errors or None,
        )
