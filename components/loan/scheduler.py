"""Installment schedule generation for term loans."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

from components.core.dates import DateLike, add_months, to_iso
from components.core.errors import ValidationError
from components.loan.models import LoanType

CENT = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


def to_money(value: Amount) -> Decimal:
    """Round an amount to cents, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ScheduledInstallment:
    """One row of a generated schedule, before it is stored."""
    installment_number: int
    due_date: str
    capital_amount: Decimal
    interest_amount: Decimal

    @property
    def total_amount(self) -> Decimal:
        return self.capital_amount + self.interest_amount


def generate_schedule(
    principal: Amount,
    start_date: DateLike,
    term_months: int,
    loan_type: Union[LoanType, str],
    rate_or_fixed_interest: Amount,
) -> List[ScheduledInstallment]:
    """
    Build the ordered installment schedule of a loan.

    Capital is amortized evenly: every installment carries ``principal / term``
    rounded to cents and the last one absorbs the rounding remainder, so the
    capital of the schedule always adds up to the principal exactly.

    Interest depends on the loan type:

    - standard: ``rate`` percent of the balance still owed before the
      installment's capital is deducted (declining balance).
    - custom: the same fixed amount on every installment.

    Installment ``i`` falls due ``i`` calendar months after ``start_date``.
    A term of zero or less yields an empty schedule (open loan).
    """
    if term_months <= 0:
        return []

    principal = to_money(principal)
    if principal <= 0:
        raise ValidationError("The loan amount must be greater than 0")

    try:
        loan_type = LoanType(loan_type)
    except ValueError:
        raise ValidationError(f"Unknown loan type: {loan_type}")
    rate_or_fixed_interest = Decimal(str(rate_or_fixed_interest or 0))
    if rate_or_fixed_interest < 0:
        raise ValidationError("Interest cannot be negative")

    capital_per_installment = to_money(principal / term_months)
    if capital_per_installment * (term_months - 1) > principal:
        raise ValidationError("The loan amount is too small for the number of installments")
    remaining_balance = principal
    schedule: List[ScheduledInstallment] = []

    for number in range(1, term_months + 1):
        if number == term_months:
            capital = remaining_balance
        else:
            capital = capital_per_installment

        if loan_type == LoanType.STANDARD:
            interest = to_money(remaining_balance * rate_or_fixed_interest / 100)
        else:
            interest = to_money(rate_or_fixed_interest)

        schedule.append(ScheduledInstallment(
            installment_number=number,
            due_date=to_iso(add_months(start_date, number)),
            capital_amount=capital,
            interest_amount=interest,
        ))
        remaining_balance -= capital

    return schedule


def schedule_totals(schedule: List[ScheduledInstallment]) -> dict:
    """Capital, interest and grand total of a schedule."""
    capital = sum((row.capital_amount for row in schedule), Decimal("0"))
    interest = sum((row.interest_amount for row in schedule), Decimal("0"))
    return {"capital": capital, "interest": interest, "total": capital + interest}
