"""Repository for partner operations."""

from typing import List, Optional
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.errors import NotFoundError
from components.core.logging import get_logger
from components.core.transactions import commit_batch
from components.loan.models import Installment, Loan
from components.partner import schemas
from components.partner.models import Partner

logger = get_logger(__name__)


class PartnerRepository:
    """Repository for partner operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, partner: schemas.PartnerCreate) -> Partner:
        """Register a new partner. Duplicates are allowed."""
        db_partner = Partner(
            first_name=partner.first_name.strip(),
            last_name=partner.last_name.strip(),
            identification_number=partner.identification_number.strip(),
            alias=partner.alias.strip(),
        )
        self.session.add(db_partner)
        await commit_batch(self.session)
        logger.info("Registered partner %s (%s)", db_partner.full_name, db_partner.id)
        return db_partner

    async def get_by_id(self, partner_id: str) -> Optional[Partner]:
        result = await self.session.execute(
            select(Partner).where(Partner.id == partner_id)
        )
        return result.scalar_one_or_none()

    async def get_or_raise(self, partner_id: str) -> Partner:
        partner = await self.get_by_id(partner_id)
        if partner is None:
            raise NotFoundError(f"Partner {partner_id} does not exist")
        return partner

    async def get_all(self, search: Optional[str] = None) -> List[Partner]:
        """List partners, optionally filtered by name, alias or identification."""
        query = select(Partner).order_by(Partner.last_name, Partner.first_name)
        if search:
            term = f"%{search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(Partner.first_name).like(term),
                    func.lower(Partner.last_name).like(term),
                    func.lower(Partner.alias).like(term),
                    func.lower(Partner.identification_number).like(term),
                )
            )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_by_full_name(self, full_name: str) -> Optional[Partner]:
        """Exact "First Last" match, used by the loan import."""
        partners = await self.get_all()
        wanted = full_name.strip()
        return next((p for p in partners if p.full_name == wanted), None)

    async def update(self, partner_id: str, partner: schemas.PartnerUpdate) -> Partner:
        """
        Update partner details.

        Names copied onto existing loans, payments and receipts keep the value
        they had when those records were written.
        """
        db_partner = await self.get_or_raise(partner_id)
        for field, value in partner.model_dump(exclude_none=True).items():
            setattr(db_partner, field, value.strip())
        await commit_batch(self.session)
        return db_partner

    async def delete(self, partner_id: str) -> schemas.PartnerDeleted:
        """Delete a partner together with all of its loans and their installments."""
        await self.get_or_raise(partner_id)

        result = await self.session.execute(
            select(Loan.id).where(Loan.partner_id == partner_id)
        )
        loan_ids = [row[0] for row in result.all()]

        installments_deleted = 0
        if loan_ids:
            result = await self.session.execute(
                delete(Installment).where(Installment.loan_id.in_(loan_ids))
            )
            installments_deleted = result.rowcount
            await self.session.execute(delete(Loan).where(Loan.id.in_(loan_ids)))
        await self.session.execute(delete(Partner).where(Partner.id == partner_id))
        await commit_batch(self.session)

        logger.info(
            "Deleted partner %s with %d loan(s) and %d installment(s)",
            partner_id, len(loan_ids), installments_deleted,
        )
        return schemas.PartnerDeleted(
            partner_id=partner_id,
            loans_deleted=len(loan_ids),
            installments_deleted=installments_deleted,
        )
