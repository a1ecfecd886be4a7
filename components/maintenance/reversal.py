"""Undoing a recorded payment."""

import re
from datetime import date
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import as_date
from components.core.errors import NotFoundError, ValidationError
from components.core.logging import get_logger
from components.core.transactions import run_in_transaction
from components.loan.models import Installment, InstallmentStatus, Loan, LoanStatus
from components.maintenance.schemas import MaintenanceReport
from components.payment.models import Payment, PaymentType

logger = get_logger(__name__)


class PaymentReversal:
    """Deletes a payment and restores what it changed."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def revert_payment(self, payment_id: str, today: Optional[date] = None) -> MaintenanceReport:
        """
        Revert a payment inside one transaction.

        Each installment it paid goes back to overdue when its due date is
        before today and to pending otherwise, and loses its payment date,
        payment and receipt links. A finished loan becomes Active again, even
        when other payments on that loan remain. A contribution's capital is
        returned to the loan balance. The payment record is deleted.

        All records are read before the first write.
        """
        payment_id = re.sub(r"[^a-zA-Z0-9]", "", payment_id)
        if not payment_id:
            raise ValidationError("A payment id is required")
        today = today or date.today()

        async def apply(session: AsyncSession) -> MaintenanceReport:
            payment = await _fetch_one(session, Payment, payment_id)
            if payment is None:
                raise NotFoundError(f"Payment {payment_id} was not found")

            installments = []
            if payment.installment_ids:
                result = await session.execute(
                    select(Installment)
                    .where(Installment.id.in_(payment.installment_ids))
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                installments = list(result.scalars().all())

            loan = await _fetch_one(session, Loan, payment.loan_id) if payment.loan_id else None

            logs = []
            for inst in installments:
                overdue = as_date(inst.due_date) < today
                inst.status = (InstallmentStatus.OVERDUE if overdue else InstallmentStatus.PENDING).value
                inst.payment_date = None
                inst.payment_id = None
                inst.receipt_id = None
                logs.append(f"Installment {inst.id} restored to {inst.status}")

            missing = set(payment.installment_ids or []) - {inst.id for inst in installments}
            for installment_id in sorted(missing):
                logs.append(f"Installment {installment_id} no longer exists, skipped")

            if loan is not None:
                if payment.type == PaymentType.INDIVIDUAL_CONTRIBUTION and payment.capital_amount:
                    loan.total_amount = loan.total_amount + payment.capital_amount
                    logs.append(f"Loan {loan.id} balance restored to {loan.total_amount}")
                if loan.status == LoanStatus.FINISHED:
                    loan.status = LoanStatus.ACTIVE.value
                    logs.append(f"Loan {loan.id} reopened as Active")

            await session.delete(payment)
            await session.flush()
            return MaintenanceReport(
                count=len(installments),
                message=f"Payment {payment_id} was reverted",
                logs=logs,
            )

        report = await run_in_transaction(self.session, apply)
        logger.info("Reverted payment %s (%d installment(s))", payment_id, report.count)
        return report


async def _fetch_one(session: AsyncSession, model, record_id: str):
    result = await session.execute(
        select(model)
        .where(model.id == record_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
