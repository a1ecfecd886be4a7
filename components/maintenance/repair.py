"""Best-effort clean-up of historical records.

These utilities make forward progress over inconsistent legacy data: every
decision is logged, and records that cannot be fixed are skipped with an
IntegrityWarning instead of failing the run.
"""

import math
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import is_iso, parse_iso, parse_legacy_date, to_iso
from components.core.errors import IntegrityWarning
from components.core.logging import get_logger
from components.core.transactions import commit_batch
from components.loan.models import Installment, InstallmentStatus
from components.loan.scheduler import to_money
from components.maintenance.schemas import MaintenanceReport
from components.partner.models import Partner
from components.payment.models import Payment
from components.receipt.repository import ReceiptRepository

logger = get_logger(__name__)

# Share of a legacy payment attributed to interest when its breakdown is missing.
# A one-off approximation for old records, not derived from any loan schedule.
LEGACY_INTEREST_RATIO = Decimal("0.046")


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, Decimal):
        return value.is_nan()
    if isinstance(value, float):
        return math.isnan(value)
    return False


class DataRepair:
    """Maintenance sweeps over payments, installments and receipts."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.warnings: List[IntegrityWarning] = []

    def _skip(self, logs: List[str], record_id: str, reason: str) -> None:
        self.warnings.append(IntegrityWarning(record_id, reason))
        logs.append(f"ID: {record_id} | SKIPPED: {reason}")
        logger.warning("Skipped %s: %s", record_id, reason)

    async def repair_payments(self) -> MaintenanceReport:
        """
        Fix legacy payments.

        - A payment date without a ``T`` separator is read as dd/mm/yyyy and
          rewritten as ISO; if it cannot be read the payment is left alone.
        - A missing capital or interest amount is imputed from the total:
          interest = total * 4.6% (rounded to cents), capital = the rest.

        All fixes are committed together; nothing is written when nothing
        needed fixing.
        """
        result = await self.session.execute(select(Payment))
        logs: List[str] = []
        corrected = 0

        for payment in result.scalars().all():
            new_date: Optional[str] = None
            if isinstance(payment.payment_date, str) and not is_iso(payment.payment_date):
                parsed = parse_legacy_date(payment.payment_date)
                if parsed is None:
                    self._skip(logs, payment.id, f"unrecognised date format '{payment.payment_date}'")
                    continue
                new_date = to_iso(parsed)
                logs.append(f"ID: {payment.id} | Date converted: {payment.payment_date} -> {new_date}")

            changed = False
            if _is_missing(payment.capital_amount) or _is_missing(payment.interest_amount):
                total = payment.total_amount
                if _is_missing(total) or not total:
                    self._skip(logs, payment.id, "breakdown missing and total amount is not valid")
                else:
                    interest = to_money(Decimal(total) * LEGACY_INTEREST_RATIO)
                    capital = to_money(Decimal(total) - interest)
                    logs.append(
                        f"ID: {payment.id} | Breakdown before: (C: {payment.capital_amount}, "
                        f"I: {payment.interest_amount}) -> after: (C: {capital}, I: {interest})"
                    )
                    payment.capital_amount = capital
                    payment.interest_amount = interest
                    changed = True

            if new_date:
                payment.payment_date = new_date
                changed = True
            if changed:
                corrected += 1

        if corrected:
            await commit_batch(self.session)
            message = f"{corrected} payment record(s) corrected"
        else:
            message = "No payment records needed correction"
        logger.info("Payment repair: %s", message)
        return MaintenanceReport(count=corrected, message=message, logs=logs)

    async def repair_installment_dates(self) -> MaintenanceReport:
        """Rewrite non-ISO payment dates of paid installments (dd/mm/yyyy or yyyy-mm-dd)."""
        result = await self.session.execute(
            select(Installment).where(Installment.status == InstallmentStatus.PAID.value)
        )
        logs: List[str] = []
        corrected = 0

        for inst in result.scalars().all():
            if not inst.payment_date or is_iso(inst.payment_date):
                continue
            parsed = parse_legacy_date(inst.payment_date)
            if parsed is None:
                try:
                    parsed = parse_iso(inst.payment_date)
                except ValueError:
                    self._skip(logs, inst.id, f"unrecognised date format '{inst.payment_date}'")
                    continue
            new_date = to_iso(parsed)
            logs.append(f"ID: {inst.id} | Date corrected: {inst.payment_date} -> {new_date}")
            inst.payment_date = new_date
            corrected += 1

        if corrected:
            await commit_batch(self.session)
        logger.info("Installment date repair corrected %d record(s)", corrected)
        return MaintenanceReport(
            count=corrected,
            message=f"{corrected} installment date(s) corrected" if corrected else "No installment dates needed correction",
            logs=logs,
        )

    async def clean_orphan_installments(self) -> MaintenanceReport:
        """Delete installments whose partner no longer exists."""
        partner_ids = set((await self.session.execute(select(Partner.id))).scalars().all())
        result = await self.session.execute(select(Installment.id, Installment.partner_id))
        orphans = [row.id for row in result.all() if row.partner_id not in partner_ids]

        if not orphans:
            return MaintenanceReport(count=0, message="No orphan installments found")

        await self.session.execute(delete(Installment).where(Installment.id.in_(orphans)))
        await commit_batch(self.session)
        logger.info("Deleted %d orphan installment(s)", len(orphans))
        return MaintenanceReport(
            count=len(orphans),
            message=f"{len(orphans)} orphan installment(s) deleted",
            logs=[f"ID: {i} | deleted" for i in orphans],
        )

    async def generate_missing_receipts(self) -> MaintenanceReport:
        """Create receipts for paid installments that never got one."""
        result = await self.session.execute(
            select(Installment).where(
                Installment.status == InstallmentStatus.PAID.value,
                Installment.receipt_id.is_(None),
            )
        )
        installments = list(result.scalars().all())
        if not installments:
            return MaintenanceReport(count=0, message="No paid installments without a receipt")

        result = await self.session.execute(
            select(Partner).where(Partner.id.in_({i.partner_id for i in installments}))
        )
        partners = {p.id: p for p in result.scalars().all()}

        receipts = ReceiptRepository(self.session)
        logs = []
        for inst in installments:
            partner = partners.get(inst.partner_id)
            receipt = receipts.stage_installment_payment(
                inst,
                inst.payment_id,
                partner.full_name if partner else inst.partner_id,
                partner,
            )
            logs.append(f"ID: {inst.id} | receipt {receipt.id} generated")

        await commit_batch(self.session)
        logger.info("Generated %d missing receipt(s)", len(installments))
        return MaintenanceReport(
            count=len(installments),
            message=f"{len(installments)} receipt(s) generated",
            logs=logs,
        )
