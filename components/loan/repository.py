"""Repository for loan operations."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import to_iso
from components.core.database import new_id
from components.core.errors import NotFoundError
from components.core.logging import get_logger
from components.core.transactions import commit_batch
from components.loan import schemas
from components.loan.models import Installment, InstallmentStatus, Loan, LoanStatus, LoanType
from components.loan.scheduler import generate_schedule, schedule_totals, to_money
from components.partner.repository import PartnerRepository
from components.receipt.repository import ReceiptRepository

logger = get_logger(__name__)


class LoanRepository:
    """Repository for loan operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, loan: schemas.LoanCreate) -> Loan:
        """
        Grant a loan.

        The loan, its installment schedule and the grant receipt are written in
        a single commit: either the loan exists with its whole schedule or
        nothing was written.
        """
        partner = await PartnerRepository(self.session).get_or_raise(loan.partner_id)

        schedule = generate_schedule(
            principal=loan.total_amount,
            start_date=loan.start_date,
            term_months=loan.number_of_installments,
            loan_type=loan.loan_type,
            rate_or_fixed_interest=loan.interest_parameter,
        )

        db_loan = Loan(
            id=new_id(),
            partner_id=partner.id,
            partner_name=partner.full_name,
            loan_type=loan.loan_type.value,
            total_amount=to_money(loan.total_amount),
            start_date=to_iso(loan.start_date),
            number_of_installments=loan.number_of_installments,
            interest_rate=loan.interest_rate if loan.loan_type == LoanType.STANDARD else 0,
            fixed_interest_amount=(
                loan.fixed_interest_amount if loan.loan_type == LoanType.CUSTOM else None
            ),
            status=LoanStatus.ACTIVE.value,
        )
        self.session.add(db_loan)

        for row in schedule:
            self.session.add(Installment(
                id=new_id(),
                loan_id=db_loan.id,
                partner_id=partner.id,
                installment_number=row.installment_number,
                due_date=row.due_date,
                status=InstallmentStatus.PENDING.value,
                capital_amount=row.capital_amount,
                interest_amount=row.interest_amount,
                total_amount=row.total_amount,
                payment_date=None,
            ))

        totals = schedule_totals(schedule) if schedule else None
        ReceiptRepository(self.session).stage_loan_grant(db_loan, partner, totals)
        await commit_batch(self.session)

        logger.info(
            "Granted %s loan %s of %s to %s with %d installment(s), %s repayable",
            db_loan.loan_type, db_loan.id, db_loan.total_amount, db_loan.partner_name, len(schedule),
            totals["total"] if totals else db_loan.total_amount,
        )
        return db_loan

    async def get_by_id(self, loan_id: str) -> Optional[Loan]:
        result = await self.session.execute(
            select(Loan).where(Loan.id == loan_id)
        )
        return result.scalar_one_or_none()

    async def get_or_raise(self, loan_id: str) -> Loan:
        loan = await self.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} does not exist")
        return loan

    async def get_all(
        self,
        partner_id: Optional[str] = None,
        status: Optional[LoanStatus] = None,
    ) -> List[Loan]:
        """Get all loans with optional filtering."""
        query = select(Loan).order_by(Loan.start_date.desc())
        if partner_id:
            query = query.where(Loan.partner_id == partner_id)
        if status:
            query = query.where(Loan.status == LoanStatus(status).value)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_installments(self, loan_id: str) -> List[Installment]:
        """All installments of a loan in installment order."""
        result = await self.session.execute(
            select(Installment)
            .where(Installment.loan_id == loan_id)
            .order_by(Installment.installment_number)
        )
        return list(result.scalars().all())
