"""Overdue marking of pending installments."""

from datetime import date
from typing import Iterable, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import DateLike, as_date, month_bounds
from components.core.errors import ValidationError
from components.core.logging import get_logger
from components.core.transactions import commit_batch
from components.loan.models import Installment, InstallmentStatus
from components.maintenance.schemas import MaintenanceReport

logger = get_logger(__name__)


class OverdueSweeper:
    """Moves installments between pending and overdue."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def sweep(self, reference_date: Optional[DateLike] = None) -> MaintenanceReport:
        """
        Mark pending installments due before ``reference_date`` as overdue.

        Only the calendar day is compared. Running the sweep again for the
        same day changes nothing.
        """
        cutoff = as_date(reference_date) if reference_date else date.today()
        pending = await self._by_status(InstallmentStatus.PENDING)

        logs = []
        count = 0
        for inst in pending:
            try:
                due = as_date(inst.due_date)
            except ValueError:
                logs.append(f"{inst.id}: skipped, unreadable due date '{inst.due_date}'")
                logger.warning("Installment %s has unreadable due date %r", inst.id, inst.due_date)
                continue
            if due < cutoff:
                inst.status = InstallmentStatus.OVERDUE.value
                logger.debug("Installment %s due %s is overdue", inst.id, due)
                count += 1

        if count == 0:
            return MaintenanceReport(count=0, message="No pending installments are past due", logs=logs)

        await commit_batch(self.session)
        logger.info("Overdue sweep for %s marked %d installment(s) overdue", cutoff, count)
        return MaintenanceReport(
            count=count,
            message=f"{count} installment(s) marked as overdue",
            logs=logs,
        )

    async def revert_overdue(
        self,
        start: Optional[Tuple[int, int]] = None,
        end: Optional[Tuple[int, int]] = None,
    ) -> MaintenanceReport:
        """
        Put overdue installments back to pending.

        With ``start`` and ``end`` as ``(year, month)`` only installments due
        from the first day of the start month to the last day of the end
        month are reverted.
        """
        window = None
        if start or end:
            if not (start and end):
                raise ValidationError("Both the start and the end of the range are required")
            window = (month_bounds(*start)[0], month_bounds(*end)[1])
            if window[1] < window[0]:
                raise ValidationError("The end of the range cannot be before its start")

        count = 0
        for inst in await self._by_status(InstallmentStatus.OVERDUE):
            if window and not window[0] <= as_date(inst.due_date) <= window[1]:
                continue
            inst.status = InstallmentStatus.PENDING.value
            count += 1

        if count == 0:
            return MaintenanceReport(count=0, message="No overdue installments matched")

        await commit_batch(self.session)
        logger.info("Reverted %d overdue installment(s) to pending", count)
        return MaintenanceReport(count=count, message=f"{count} installment(s) reverted to pending")

    async def close_month(
        self,
        year: int,
        month: int,
        keep_ids: Iterable[str] = (),
    ) -> MaintenanceReport:
        """Mark the month's pending installments overdue, except those in ``keep_ids``."""
        first_day, last_day = month_bounds(year, month)
        keep = set(keep_ids)

        count = 0
        for inst in await self._by_status(InstallmentStatus.PENDING):
            if inst.id in keep or not first_day <= as_date(inst.due_date) <= last_day:
                continue
            inst.status = InstallmentStatus.OVERDUE.value
            count += 1

        if count == 0:
            return MaintenanceReport(count=0, message="Nothing to close for this month")

        await commit_batch(self.session)
        logger.info("Closed %04d-%02d: %d unpaid installment(s) marked overdue", year, month, count)
        return MaintenanceReport(count=count, message=f"{count} unpaid installment(s) marked as overdue")

    async def _by_status(self, status: InstallmentStatus):
        result = await self.session.execute(
            select(Installment).where(Installment.status == status.value)
        )
        return list(result.scalars().all())
