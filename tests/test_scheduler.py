"""Tests for installment schedule generation."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from components.core.errors import ValidationError
from components.loan.models import LoanType
from components.loan.scheduler import generate_schedule, schedule_totals, to_money

START = datetime(2024, 1, 15, tzinfo=timezone.utc)


class TestStandardSchedule:
    """Declining-balance interest"""

    def test_worked_example(self):
        schedule = generate_schedule(Decimal("1200"), START, 12, LoanType.STANDARD, Decimal("5"))

        assert len(schedule) == 12
        first, second, last = schedule[0], schedule[1], schedule[-1]
        assert first.capital_amount == Decimal("100.00")
        assert first.interest_amount == Decimal("60.00")
        assert first.total_amount == Decimal("160.00")
        assert second.interest_amount == Decimal("55.00")
        assert second.total_amount == Decimal("155.00")
        assert last.interest_amount == Decimal("5.00")
        assert schedule_totals(schedule)["interest"] == Decimal("390.00")

    def test_due_dates_follow_calendar_months(self):
        schedule = generate_schedule(1200, START, 3, "standard", 5)

        assert [row.due_date for row in schedule] == [
            "2024-02-15T00:00:00.000Z",
            "2024-03-15T00:00:00.000Z",
            "2024-04-15T00:00:00.000Z",
        ]

    def test_end_of_month_start_is_clamped(self):
        schedule = generate_schedule(300, datetime(2024, 1, 31, tzinfo=timezone.utc), 2, LoanType.STANDARD, 1)
        assert schedule[0].due_date.startswith("2024-02-29")
        assert schedule[1].due_date.startswith("2024-03-31")

    def test_installment_numbers_are_sequential(self):
        schedule = generate_schedule(1000, START, 6, LoanType.STANDARD, 2)
        assert [row.installment_number for row in schedule] == [1, 2, 3, 4, 5, 6]

    def test_interest_never_increases(self):
        schedule = generate_schedule(Decimal("5000"), START, 24, LoanType.STANDARD, Decimal("3.5"))
        interests = [row.interest_amount for row in schedule]
        assert all(a >= b for a, b in zip(interests, interests[1:]))


class TestCapitalSum:
    """Capital always adds up to the principal"""

    @pytest.mark.parametrize("principal,term", [
        ("1000", 3),
        ("100", 7),
        ("2500.50", 11),
        ("0.05", 5),
    ])
    def test_capital_adds_up_to_principal(self, principal, term):
        schedule = generate_schedule(Decimal(principal), START, term, LoanType.STANDARD, Decimal("2"))
        assert sum(row.capital_amount for row in schedule) == Decimal(principal)

    def test_last_installment_absorbs_remainder(self):
        schedule = generate_schedule(Decimal("1000"), START, 3, LoanType.STANDARD, 0)
        assert [row.capital_amount for row in schedule] == [
            Decimal("333.33"), Decimal("333.33"), Decimal("333.34"),
        ]

    def test_total_is_capital_plus_interest(self):
        for row in generate_schedule(Decimal("777"), START, 9, LoanType.STANDARD, Decimal("4.25")):
            assert row.total_amount == row.capital_amount + row.interest_amount


class TestCustomSchedule:
    """Fixed interest per installment"""

    def test_fixed_interest_on_every_installment(self):
        schedule = generate_schedule(Decimal("500"), START, 5, LoanType.CUSTOM, Decimal("10"))

        assert all(row.interest_amount == Decimal("10.00") for row in schedule)
        assert all(row.capital_amount == Decimal("100.00") for row in schedule)
        assert schedule_totals(schedule)["total"] == Decimal("550.00")

    def test_custom_without_interest(self):
        schedule = generate_schedule(Decimal("300"), START, 3, LoanType.CUSTOM, None)
        assert all(row.interest_amount == Decimal("0.00") for row in schedule)


class TestScheduleEdgeCases:

    @pytest.mark.parametrize("term", [0, -1])
    def test_no_term_means_no_schedule(self, term):
        assert generate_schedule(Decimal("1000"), START, term, LoanType.CUSTOM, 0) == []

    def test_rejects_non_positive_principal(self):
        with pytest.raises(ValidationError):
            generate_schedule(Decimal("0"), START, 12, LoanType.STANDARD, 5)

    def test_rejects_unknown_loan_type(self):
        with pytest.raises(ValidationError):
            generate_schedule(Decimal("100"), START, 2, "balloon", 5)

    def test_rejects_negative_interest(self):
        with pytest.raises(ValidationError):
            generate_schedule(Decimal("100"), START, 2, LoanType.STANDARD, -1)

    def test_rejects_amount_too_small_for_term(self):
        with pytest.raises(ValidationError):
            generate_schedule(Decimal("0.07"), START, 10, LoanType.STANDARD, 0)

    def test_to_money_rounds_half_up(self):
        assert to_money("2.345") == Decimal("2.35")
        assert to_money(1) == Decimal("1.00")
