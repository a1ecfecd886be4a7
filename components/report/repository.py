"""Repository for reports."""

from decimal import Decimal
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import as_date, month_bounds
from components.core.logging import get_logger
from components.loan.models import Installment, InstallmentStatus, Loan, LoanStatus
from components.loan.schemas import Installment as InstallmentSchema
from components.partner.models import Partner
from components.payment.models import Payment
from components.payment.schemas import Payment as PaymentSchema
from components.report import schemas

logger = get_logger(__name__)


class ReportRepository:
    """Repository for reports."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def payments_report(self, year: int, month: int) -> schemas.PaymentsReport:
        """
        Payments dated within a month and the amount collected.

        Payments whose date cannot be read are left out and counted in
        ``skipped_records``; the payment repair utility fixes them.
        """
        first_day, last_day = month_bounds(year, month)
        result = await self.session.execute(select(Payment))

        payments = []
        skipped = 0
        for payment in result.scalars().all():
            try:
                paid_on = as_date(payment.payment_date)
            except ValueError:
                skipped += 1
                continue
            if first_day <= paid_on <= last_day:
                payments.append(payment)

        if skipped:
            logger.warning("Payments report left out %d payment(s) with unreadable dates", skipped)

        total = sum((Decimal(p.total_amount or 0) for p in payments), Decimal("0"))
        return schemas.PaymentsReport(
            year=year,
            month=month,
            payments=[PaymentSchema.model_validate(p) for p in sorted(payments, key=lambda p: p.payment_date)],
            total_collected=float(total),
            skipped_records=skipped,
        )

    async def unpaid_report(self, year: int, month: int) -> schemas.UnpaidReport:
        """
        Pending and overdue installments falling due within a month.

        Installments whose due date cannot be read are left out and counted in
        ``skipped_records``.
        """
        first_day, last_day = month_bounds(year, month)
        result = await self.session.execute(
            select(Installment).where(
                Installment.status.in_([InstallmentStatus.PENDING.value, InstallmentStatus.OVERDUE.value])
            )
        )
        installments = []
        skipped = 0
        for inst in result.scalars().all():
            try:
                due = as_date(inst.due_date)
            except ValueError:
                logger.warning("Installment %s has unreadable due date %r", inst.id, inst.due_date)
                skipped += 1
                continue
            if first_day <= due <= last_day:
                installments.append(inst)

        total = sum((Decimal(inst.total_amount) for inst in installments), Decimal("0"))
        return schemas.UnpaidReport(
            year=year,
            month=month,
            installments=[InstallmentSchema.model_validate(i) for i in sorted(installments, key=lambda i: i.due_date)],
            total_receivable=float(total),
            skipped_records=skipped,
        )

    async def dashboard_summary(self) -> schemas.DashboardSummary:
        """
        Outstanding balance, interest collected, partner and active loan counts.

        The balance is the sum of loan amounts, which contributions lower as
        they are paid.
        """
        outstanding = (await self.session.execute(select(func.sum(Loan.total_amount)))).scalar() or 0
        interest = (await self.session.execute(select(func.sum(Payment.interest_amount)))).scalar() or 0
        partners = (await self.session.execute(select(func.count(Partner.id)))).scalar() or 0
        active_loans = (
            await self.session.execute(
                select(func.count(Loan.id)).where(Loan.status == LoanStatus.ACTIVE.value)
            )
        ).scalar() or 0

        return schemas.DashboardSummary(
            outstanding_balance=float(outstanding),
            interest_collected=float(interest),
            partners=partners,
            active_loans=active_loans,
        )
