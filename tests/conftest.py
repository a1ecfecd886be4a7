"""Shared fixtures: an in-memory SQLite database and record factories."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from components.core.database import DatabaseManager
from components.loan.models import LoanType
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.partner.repository import PartnerRepository
from components.partner.schemas import PartnerCreate
# Import all models to ensure they're registered
import components.user.models
import components.partner.models
import components.loan.models
import components.payment.models
import components.receipt.models

START = datetime(2024, 1, 15, tzinfo=timezone.utc)


def sqlite_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest_asyncio.fixture
async def db_manager():
    engine = sqlite_engine()
    manager = DatabaseManager(engine)
    await manager.create_tables()
    yield manager
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_manager):
    async with db_manager.get_db() as session:
        yield session


@pytest.fixture
def make_partner(session):
    async def _make(first_name="Ana", last_name="Torres", identification_number="0912345678", alias=""):
        return await PartnerRepository(session).create(PartnerCreate(
            first_name=first_name,
            last_name=last_name,
            identification_number=identification_number,
            alias=alias,
        ))
    return _make


@pytest.fixture
def make_loan(session):
    async def _make(
        partner,
        amount="1200",
        installments=12,
        rate="5",
        loan_type=LoanType.STANDARD,
        fixed_interest=None,
        start_date=START,
    ):
        return await LoanRepository(session).create(LoanCreate(
            partner_id=partner.id,
            loan_type=loan_type,
            total_amount=Decimal(amount),
            number_of_installments=installments,
            interest_rate=Decimal(rate),
            fixed_interest_amount=Decimal(fixed_interest) if fixed_interest is not None else None,
            start_date=start_date,
        ))
    return _make
