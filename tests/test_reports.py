"""Tests for monthly reports and the dashboard summary."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from components.loan.models import LoanType
from components.loan.repository import LoanRepository
from components.payment.models import Payment
from components.payment.repository import PaymentRepository
from components.report.repository import ReportRepository


@pytest.mark.asyncio
async def test_payments_report_for_month(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner)
    installments = await LoanRepository(session).get_installments(loan.id)
    payments = PaymentRepository(session)
    await payments.pay_installments(loan.id, [installments[0].id], datetime(2024, 3, 2, tzinfo=timezone.utc))
    await payments.pay_installments(loan.id, [installments[1].id], datetime(2024, 4, 2, tzinfo=timezone.utc))
    session.add(Payment(
        partner_id=partner.id,
        loan_id=loan.id,
        installment_ids=[],
        payment_date="15/03/2024",
        total_amount=Decimal("50"),
        partner_name=partner.full_name,
        type="installment_payment",
    ))
    await session.commit()

    report = await ReportRepository(session).payments_report(2024, 3)

    assert len(report.payments) == 1
    assert report.total_collected == 160.0
    assert report.skipped_records == 1


@pytest.mark.asyncio
async def test_unpaid_report_for_month(session, make_partner, make_loan):
    ana = await make_partner()
    luis = await make_partner("Luis", "Mendoza")
    loan = await make_loan(ana)
    await make_loan(luis, amount="300", installments=3)
    march = (await LoanRepository(session).get_installments(loan.id))[1]
    await PaymentRepository(session).pay_installments(loan.id, [march.id], datetime(2024, 3, 10, tzinfo=timezone.utc))

    report = await ReportRepository(session).unpaid_report(2024, 3)

    assert len(report.installments) == 1
    assert report.installments[0].partner_id == luis.id
    assert report.total_receivable == 110.0


@pytest.mark.asyncio
async def test_dashboard_summary(session, make_partner, make_loan):
    ana = await make_partner()
    luis = await make_partner("Luis", "Mendoza")
    loan = await make_loan(ana)
    open_loan = await make_loan(luis, amount="800", installments=0, loan_type=LoanType.CUSTOM)
    first = (await LoanRepository(session).get_installments(loan.id))[0]
    payments = PaymentRepository(session)
    await payments.pay_installments(loan.id, [first.id], datetime(2024, 2, 15, tzinfo=timezone.utc))
    await payments.register_contribution(open_loan.id, luis.id, "100", datetime(2024, 2, 20, tzinfo=timezone.utc))

    summary = await ReportRepository(session).dashboard_summary()

    # Installment payments leave the loan amount alone, contributions lower it
    assert summary.outstanding_balance == 1900.0
    assert summary.interest_collected == 60.0
    assert summary.partners == 2
    assert summary.active_loans == 2


@pytest.mark.asyncio
async def test_unpaid_report_skips_unreadable_due_dates(session, make_partner, make_loan):
    partner = await make_partner()
    loan = await make_loan(partner, amount="300", installments=3)
    installments = await LoanRepository(session).get_installments(loan.id)
    installments[0].due_date = "15/02/2024"
    await session.commit()

    report = await ReportRepository(session).unpaid_report(2024, 3)

    assert [i.id for i in report.installments] == [installments[1].id]
    assert report.skipped_records == 1
