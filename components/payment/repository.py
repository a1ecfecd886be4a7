"""Repository for recording payments against loans and installments."""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import new_id
from components.core.dates import DateLike, as_date, move_to_period, month_bounds, to_iso, utc_now
from components.core.errors import NotFoundError, ValidationError
from components.core.logging import get_logger
from components.core.transactions import commit_batch, run_in_transaction
from components.loan.models import Installment, InstallmentStatus, Loan, LoanStatus
from components.loan.schemas import Installment as InstallmentSchema
from components.loan.scheduler import to_money
from components.partner.models import Partner
from components.payment import schemas
from components.payment.models import Payment, PaymentType
from components.receipt.repository import ReceiptRepository

logger = get_logger(__name__)

UNPAID_STATUSES = (InstallmentStatus.PENDING.value, InstallmentStatus.OVERDUE.value)


class PaymentRepository:
    """
    Records money received.

    Three ways of paying are supported:

    - pay_installments: one payment covering selected installments of a loan.
    - register_contribution: a free-form amount taken off the loan balance.
    - pay_in_bulk: one payment per installment across many loans.

    Every method writes its payment and all status changes in one commit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.receipts = ReceiptRepository(session)

    async def pay_installments(
        self,
        loan_id: str,
        installment_ids: Sequence[str],
        payment_date: DateLike,
    ) -> Payment:
        """Pay specific pending or overdue installments of one loan."""
        selected = list(dict.fromkeys(installment_ids))
        if not selected:
            raise ValidationError("Select at least one installment to pay")

        loan = await self._get_loan(loan_id)
        installments = await self._get_unpaid_installments(selected)
        foreign = [inst.id for inst in installments if inst.loan_id != loan.id]
        if foreign:
            raise ValidationError(
                f"Installment(s) {', '.join(foreign)} do not belong to loan {loan.id}"
            )

        partner = await self._get_partner(loan.partner_id)
        paid_at = to_iso(payment_date)
        payment = Payment(
            id=new_id(),
            partner_id=loan.partner_id,
            loan_id=loan.id,
            installment_ids=selected,
            payment_date=paid_at,
            total_amount=_sum(inst.total_amount for inst in installments),
            capital_amount=_sum(inst.capital_amount for inst in installments),
            interest_amount=_sum(inst.interest_amount for inst in installments),
            partner_name=partner.full_name if partner else loan.partner_name,
            type=PaymentType.INSTALLMENT_PAYMENT.value,
        )
        self.session.add(payment)

        for inst in installments:
            self._mark_paid(inst, payment.id, paid_at)
            self.receipts.stage_installment_payment(inst, payment.id, payment.partner_name, partner)

        finished = await self._finish_paid_off_loans([loan.id], set(selected))
        await commit_batch(self.session)

        logger.info(
            "Payment %s of %s recorded on loan %s for %d installment(s)%s",
            payment.id, payment.total_amount, loan.id, len(installments),
            " (loan finished)" if finished else "",
        )
        return payment

    async def register_contribution(
        self,
        loan_id: str,
        partner_id: str,
        amount,
        payment_date: DateLike,
    ) -> Payment:
        """
        Take a free-form amount off the loan balance.

        The new balance depends on the balance read inside the same
        transaction, so concurrent contributions to one loan are serialized
        (row lock plus the loan's version counter) and retried on conflict.
        """
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("The contribution must be greater than 0")

        partner = await self._get_partner(partner_id)
        partner_name = partner.full_name if partner else None
        paid_at = to_iso(payment_date)
        payment_id = new_id()

        async def apply(session: AsyncSession) -> Payment:
            result = await session.execute(
                select(Loan)
                .where(Loan.id == loan_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            loan = result.scalar_one_or_none()
            if loan is None:
                raise NotFoundError(f"Loan {loan_id} does not exist")
            if loan.partner_id != partner_id:
                raise ValidationError(f"Loan {loan_id} does not belong to partner {partner_id}")
            if amount > loan.total_amount:
                raise ValidationError(
                    f"The contribution of {amount} is larger than the current loan balance "
                    f"of {loan.total_amount}; overpayment is not allowed"
                )

            new_balance = loan.total_amount - amount
            loan.total_amount = new_balance
            if new_balance <= 0:
                loan.status = LoanStatus.FINISHED.value

            payment = Payment(
                id=payment_id,
                partner_id=partner_id,
                loan_id=loan.id,
                installment_ids=[],
                payment_date=paid_at,
                total_amount=amount,
                capital_amount=amount,
                interest_amount=Decimal("0"),
                partner_name=partner_name or loan.partner_name,
                type=PaymentType.INDIVIDUAL_CONTRIBUTION.value,
            )
            session.add(payment)
            await session.flush()
            return payment

        payment = await run_in_transaction(self.session, apply)
        logger.info("Contribution %s of %s recorded on loan %s", payment.id, amount, loan_id)
        return payment

    async def pay_in_bulk(
        self,
        installment_ids: Sequence[str],
        period: Optional[Tuple[int, int]] = None,
    ) -> List[Payment]:
        """
        Mark many installments paid, possibly across loans and partners.

        One payment is written per installment. Without ``period`` every
        payment is dated now; with ``(year, month)`` each payment takes the
        installment's due date moved into that month.

        Loans whose installments end up all paid are finished in the same
        commit. The paid-off check reads each loan's installments after the
        batch is staged and is not protected against another operation
        changing the same loan at the same moment.
        """
        selected = list(dict.fromkeys(installment_ids))
        if not selected:
            raise ValidationError("Select at least one installment to pay")
        if period is not None:
            year, month = period
            month_bounds(year, month)

        installments = await self._get_unpaid_installments(selected)
        partners = await self._get_partners({inst.partner_id for inst in installments})
        now = to_iso(utc_now())

        payments = []
        for inst in sorted(installments, key=lambda i: i.due_date):
            paid_at = to_iso(move_to_period(inst.due_date, *period)) if period else now
            partner = partners.get(inst.partner_id)
            payment = Payment(
                id=new_id(),
                partner_id=inst.partner_id,
                loan_id=inst.loan_id,
                installment_ids=[inst.id],
                payment_date=paid_at,
                total_amount=inst.total_amount,
                capital_amount=inst.capital_amount,
                interest_amount=inst.interest_amount,
                partner_name=partner.full_name if partner else inst.partner_id,
                type=PaymentType.INSTALLMENT_PAYMENT.value,
            )
            self.session.add(payment)
            self._mark_paid(inst, payment.id, paid_at)
            self.receipts.stage_installment_payment(inst, payment.id, payment.partner_name, partner)
            payments.append(payment)

        loan_ids = list(dict.fromkeys(inst.loan_id for inst in installments))
        finished = await self._finish_paid_off_loans(loan_ids, set(selected))
        await commit_batch(self.session)

        logger.info(
            "Bulk payment: %d installment(s) paid across %d loan(s), %d loan(s) finished",
            len(payments), len(loan_ids), len(finished),
        )
        return payments

    async def installments_for_period(self, year: int, month: int) -> schemas.PeriodInstallments:
        """
        Unpaid installments offered for payment in a month.

        ``current`` holds pending installments due in the month; ``overdue``
        holds overdue ones and pending ones due before the month started.
        Installments with an unreadable due date are logged and left out.
        """
        first_day, last_day = month_bounds(year, month)
        result = await self.session.execute(
            select(Installment).where(Installment.status.in_(UNPAID_STATUSES))
        )

        current, overdue = [], []
        for inst in result.scalars().all():
            try:
                due = as_date(inst.due_date)
            except ValueError:
                logger.warning("Installment %s has unreadable due date %r", inst.id, inst.due_date)
                continue
            if inst.status == InstallmentStatus.PENDING and first_day <= due <= last_day:
                current.append(inst)
            elif inst.status == InstallmentStatus.OVERDUE or due < first_day:
                overdue.append(inst)

        return schemas.PeriodInstallments(
            year=year,
            month=month,
            current=[InstallmentSchema.model_validate(i) for i in sorted(current, key=lambda i: i.due_date)],
            overdue=[InstallmentSchema.model_validate(i) for i in sorted(overdue, key=lambda i: i.due_date)],
        )

    async def update_payment_date(
        self,
        payment_id: str,
        installment_id: str,
        payment_date: DateLike,
    ) -> Payment:
        """Correct the date of a payment and of the installment it paid."""
        payment = await self.get_or_raise(payment_id)
        result = await self.session.execute(
            select(Installment).where(Installment.id == installment_id)
        )
        installment = result.scalar_one_or_none()
        if installment is None:
            raise NotFoundError(f"Installment {installment_id} does not exist")
        if installment.payment_id != payment.id:
            raise ValidationError(f"Installment {installment_id} was not paid by payment {payment_id}")

        new_date = to_iso(payment_date)
        payment.payment_date = new_date
        installment.payment_date = new_date
        await commit_batch(self.session)
        logger.info("Payment %s and installment %s re-dated to %s", payment_id, installment_id, new_date)
        return payment

    async def get_or_raise(self, payment_id: str) -> Payment:
        result = await self.session.execute(
            select(Payment).where(Payment.id == payment_id)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} does not exist")
        return payment

    async def get_all(
        self,
        loan_id: Optional[str] = None,
        partner_id: Optional[str] = None,
    ) -> List[Payment]:
        query = select(Payment)
        if loan_id:
            query = query.where(Payment.loan_id == loan_id)
        if partner_id:
            query = query.where(Payment.partner_id == partner_id)
        result = await self.session.execute(query)
        return sorted(result.scalars().all(), key=lambda p: p.payment_date, reverse=True)

    async def _get_loan(self, loan_id: str) -> Loan:
        result = await self.session.execute(select(Loan).where(Loan.id == loan_id))
        loan = result.scalar_one_or_none()
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} does not exist")
        return loan

    async def _get_partner(self, partner_id: str) -> Optional[Partner]:
        result = await self.session.execute(select(Partner).where(Partner.id == partner_id))
        return result.scalar_one_or_none()

    async def _get_partners(self, partner_ids: Set[str]) -> Dict[str, Partner]:
        if not partner_ids:
            return {}
        result = await self.session.execute(select(Partner).where(Partner.id.in_(partner_ids)))
        return {p.id: p for p in result.scalars().all()}

    async def _get_unpaid_installments(self, installment_ids: List[str]) -> List[Installment]:
        result = await self.session.execute(
            select(Installment).where(Installment.id.in_(installment_ids))
        )
        found = {inst.id: inst for inst in result.scalars().all()}

        missing = [i for i in installment_ids if i not in found]
        if missing:
            raise NotFoundError(f"Installment(s) {', '.join(missing)} do not exist")
        paid = [i for i in installment_ids if found[i].status == InstallmentStatus.PAID]
        if paid:
            raise ValidationError(f"Installment(s) {', '.join(paid)} are already paid")

        return [found[i] for i in installment_ids]

    @staticmethod
    def _mark_paid(installment: Installment, payment_id: str, paid_at: str) -> None:
        installment.status = InstallmentStatus.PAID.value
        installment.payment_date = paid_at
        installment.payment_id = payment_id

    async def _finish_paid_off_loans(self, loan_ids: Iterable[str], paying: Set[str]) -> List[str]:
        """Stage Finalizado on every loan whose installments are all paid or being paid."""
        finished = []
        for loan_id in loan_ids:
            result = await self.session.execute(
                select(Installment).where(Installment.loan_id == loan_id)
            )
            installments = result.scalars().all()
            if not installments:
                continue
            if all(inst.status == InstallmentStatus.PAID or inst.id in paying for inst in installments):
                loan = await self._get_loan(loan_id)
                loan.status = LoanStatus.FINISHED.value
                finished.append(loan_id)
        return finished


def _sum(values: Iterable) -> Decimal:
    return sum((Decimal(v) for v in values), Decimal("0"))
