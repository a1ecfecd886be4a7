"""Repository for receipts."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.dates import to_iso, utc_now
from components.core.database import new_id
from components.core.errors import NotFoundError
from components.partner.models import Partner
from components.receipt.models import Receipt, ReceiptType


class ReceiptRepository:
    """Repository for receipts. Receipts are never updated once written."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def stage_loan_grant(self, loan, partner: Optional[Partner], totals: Optional[dict] = None) -> Receipt:
        """Add a loan grant receipt to the pending unit of work.

        ``totals`` are the schedule totals; open loans without a schedule omit them.
        """
        receipt = Receipt(
            id=new_id(),
            type=ReceiptType.LOAN_GRANT.value,
            partner_id=loan.partner_id,
            loan_id=loan.id,
            generation_date=loan.start_date,
            amount=loan.total_amount,
            partner_name=loan.partner_name,
            partner_identification=partner.identification_number if partner else "",
            details={
                "total_amount": float(loan.total_amount),
                "interest_rate": float(loan.interest_rate or 0),
                "number_of_installments": loan.number_of_installments,
                "loan_type": loan.loan_type,
            },
        )
        if totals:
            receipt.details["scheduled_interest"] = float(totals["interest"])
            receipt.details["total_repayable"] = float(totals["total"])
        self.session.add(receipt)
        return receipt

    def stage_installment_payment(
        self,
        installment,
        payment_id: Optional[str],
        partner_name: str,
        partner: Optional[Partner],
    ) -> Receipt:
        """Add an installment payment receipt and link it to the installment."""
        receipt = Receipt(
            id=new_id(),
            type=ReceiptType.INSTALLMENT_PAYMENT.value,
            partner_id=installment.partner_id,
            loan_id=installment.loan_id,
            payment_id=payment_id,
            installment_id=installment.id,
            generation_date=installment.payment_date or to_iso(utc_now()),
            amount=installment.total_amount,
            partner_name=partner_name,
            partner_identification=partner.identification_number if partner else "",
            details={
                "installment_number": installment.installment_number,
                "capital_amount": float(installment.capital_amount),
                "interest_amount": float(installment.interest_amount),
            },
        )
        self.session.add(receipt)
        installment.receipt_id = receipt.id
        return receipt

    async def get_or_raise(self, receipt_id: str) -> Receipt:
        result = await self.session.execute(
            select(Receipt).where(Receipt.id == receipt_id)
        )
        receipt = result.scalar_one_or_none()
        if receipt is None:
            raise NotFoundError(f"Receipt {receipt_id} does not exist")
        return receipt

    async def get_all(self, search: Optional[str] = None) -> List[Receipt]:
        """Receipts newest first, optionally filtered by partner name, identification or id."""
        result = await self.session.execute(select(Receipt))
        receipts = sorted(result.scalars().all(), key=lambda r: r.generation_date, reverse=True)
        if not search:
            return receipts

        term = search.strip().lower()
        return [
            r for r in receipts
            if term in (r.partner_name or "").lower()
            or term in (r.partner_identification or "").lower()
            or term in r.id.lower()
        ]
