"""Tests for loan origination."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select

from components.core.errors import NotFoundError
from components.loan.models import Loan, LoanStatus, LoanType, InstallmentStatus
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.receipt.models import Receipt, ReceiptType

from conftest import START


@pytest.mark.asyncio
async def test_loan_is_created_with_schedule_and_grant_receipt(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner)

    installments = await LoanRepository(session).get_installments(loan.id)
    assert loan.status == LoanStatus.ACTIVE
    assert loan.partner_name == "Ana Torres"
    assert len(installments) == 12
    assert all(inst.status == InstallmentStatus.PENDING for inst in installments)
    assert all(inst.payment_date is None for inst in installments)
    assert sum(inst.capital_amount for inst in installments) == Decimal("1200.00")
    assert installments[0].total_amount == Decimal("160.00")

    receipts = (await session.execute(select(Receipt))).scalars().all()
    assert len(receipts) == 1
    assert receipts[0].type == ReceiptType.LOAN_GRANT
    assert receipts[0].amount == Decimal("1200.00")
    assert receipts[0].partner_identification == partner.identification_number
    assert receipts[0].details["scheduled_interest"] == 390.0
    assert receipts[0].details["total_repayable"] == 1590.0


@pytest.mark.asyncio
async def test_custom_loan_fixed_interest(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner, amount="500", installments=5, loan_type=LoanType.CUSTOM, fixed_interest="10")

    installments = await LoanRepository(session).get_installments(loan.id)
    assert loan.interest_rate == 0
    assert loan.fixed_interest_amount == Decimal("10.00")
    assert [inst.total_amount for inst in installments] == [Decimal("110.00")] * 5


@pytest.mark.asyncio
async def test_open_custom_loan_has_no_installments(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner, amount="800", installments=0, loan_type=LoanType.CUSTOM)

    assert await LoanRepository(session).get_installments(loan.id) == []
    assert loan.total_amount == Decimal("800.00")
    receipt = (await session.execute(select(Receipt))).scalar_one()
    assert "total_repayable" not in receipt.details


def test_standard_loan_needs_a_term():
    with pytest.raises(SchemaValidationError):
        LoanCreate(partner_id="p", total_amount=Decimal("100"), number_of_installments=0, start_date=START)


@pytest.mark.asyncio
async def test_unknown_partner_writes_nothing(session):
    with pytest.raises(NotFoundError):
        await LoanRepository(session).create(LoanCreate(
            partner_id="missing",
            total_amount=Decimal("100"),
            number_of_installments=2,
            start_date=START,
        ))
    assert (await session.execute(select(func.count(Loan.id)))).scalar() == 0


@pytest.mark.asyncio
async def test_get_all_filters(session, make_partner, make_loan):
    ana = await make_partner()
    luis = await make_partner("Luis", "Mendoza")
    await make_loan(ana)
    await make_loan(luis, installments=3, amount="300")
    repo = LoanRepository(session)

    assert len(await repo.get_all()) == 2
    assert [loan.partner_id for loan in await repo.get_all(partner_id=luis.id)] == [luis.id]
    assert await repo.get_all(status=LoanStatus.FINISHED) == []
