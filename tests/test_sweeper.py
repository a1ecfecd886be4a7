"""Tests for overdue marking, reverting and month closing."""

from datetime import date

import pytest

from components.core.errors import ValidationError
from components.loan.models import InstallmentStatus
from components.loan.repository import LoanRepository
from components.maintenance.sweeper import OverdueSweeper


def _statuses(installments):
    return [inst.status for inst in installments]


@pytest.mark.asyncio
async def test_sweep_marks_past_due_installments(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner)  # due on the 15th, Feb 2024 .. Jan 2025
    installments = await LoanRepository(session).get_installments(loan.id)

    report = await OverdueSweeper(session).sweep(date(2024, 6, 15))

    assert report.count == 4
    assert _statuses(installments[:4]) == [InstallmentStatus.OVERDUE.value] * 4
    # Due on the reference day itself is not overdue yet
    assert installments[4].status == InstallmentStatus.PENDING


@pytest.mark.asyncio
async def test_sweep_is_idempotent(session, make_partner, make_loan):
    partner = await make_partner()
    await make_loan(partner)
    sweeper = OverdueSweeper(session)

    first = await sweeper.sweep(date(2024, 6, 16))
    second = await sweeper.sweep(date(2024, 6, 16))

    assert first.count == 5
    assert second.count == 0


@pytest.mark.asyncio
async def test_sweep_ignores_time_of_day(session, make_partner, make_loan):
    partner = await make_partner()
    await make_loan(partner, amount="100", installments=1)

    report = await OverdueSweeper(session).sweep("2024-02-15T23:59:59.000Z")
    assert report.count == 0


@pytest.mark.asyncio
async def test_sweep_skips_paid_installments(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner, amount="200", installments=2)
    installments = await LoanRepository(session).get_installments(loan.id)
    installments[0].status = InstallmentStatus.PAID.value
    await session.commit()

    report = await OverdueSweeper(session).sweep(date(2025, 1, 1))

    assert report.count == 1
    assert installments[0].status == InstallmentStatus.PAID


@pytest.mark.asyncio
async def test_revert_overdue_within_range(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner)
    installments = await LoanRepository(session).get_installments(loan.id)
    sweeper = OverdueSweeper(session)
    await sweeper.sweep(date(2024, 6, 16))

    report = await sweeper.revert_overdue(start=(2024, 3), end=(2024, 4))

    assert report.count == 2
    assert _statuses(installments[:5]) == [
        InstallmentStatus.OVERDUE.value,
        InstallmentStatus.PENDING.value,
        InstallmentStatus.PENDING.value,
        InstallmentStatus.OVERDUE.value,
        InstallmentStatus.OVERDUE.value,
    ]


@pytest.mark.asyncio
async def test_revert_all_overdue(session, make_partner, make_loan):
    partner = await make_partner()
    await make_loan(partner)
    sweeper = OverdueSweeper(session)
    await sweeper.sweep(date(2024, 6, 16))

    report = await sweeper.revert_overdue()
    assert report.count == 5


@pytest.mark.asyncio
async def test_revert_overdue_needs_a_complete_range(session):
    sweeper = OverdueSweeper(session)
    with pytest.raises(ValidationError):
        await sweeper.revert_overdue(start=(2024, 3))
    with pytest.raises(ValidationError):
        await sweeper.revert_overdue(start=(2024, 5), end=(2024, 3))


@pytest.mark.asyncio
async def test_close_month_keeps_selected_installments(session, make_partner, make_loan):
    ana = await make_partner()
    luis = await make_partner("Luis", "Mendoza")
    loan_a = await make_loan(ana, amount="300", installments=3)
    loan_b = await make_loan(luis, amount="300", installments=3)
    loans = LoanRepository(session)
    march_a = (await loans.get_installments(loan_a.id))[1]
    march_b = (await loans.get_installments(loan_b.id))[1]

    report = await OverdueSweeper(session).close_month(2024, 3, keep_ids=[march_b.id])

    assert report.count == 1
    assert march_a.status == InstallmentStatus.OVERDUE
    assert march_b.status == InstallmentStatus.PENDING
