"""Script to seed demo data into the database."""

from datetime import datetime, timezone
from decimal import Decimal
import asyncio

from components.core.config import get_settings
from components.core.init_db import db_manager, get_db
from components.core.logging import get_logger, setup_logging
from components.loan.models import LoanType
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.maintenance.sweeper import OverdueSweeper
from components.partner.repository import PartnerRepository
from components.partner.schemas import PartnerCreate
from components.payment.repository import PaymentRepository
from components.user.repository import UserRepository
from components.user.schemas import UserCreate

logger = get_logger(__name__)

PARTNERS = [
    ("Ana", "Torres", "0912345678", "Anita"),
    ("Luis", "Mendoza", "0923456789", ""),
    ("Carmen", "Vera", "0934567890", "Chiqui"),
]


async def seed_data():
    """Seed an operator, a few partners, their loans and some payments."""
    await db_manager.create_tables()

    async for db in get_db():
        users = UserRepository(db)
        if not await users.exists("admin"):
            await users.create(UserCreate(login="admin", password="admin123", pin="1234"))

        partners = PartnerRepository(db)
        loans = LoanRepository(db)
        created = []
        for first_name, last_name, identification, alias in PARTNERS:
            partner = await partners.create(PartnerCreate(
                first_name=first_name,
                last_name=last_name,
                identification_number=identification,
                alias=alias,
            ))
            created.append(partner)

        start = datetime(2024, 1, 15, tzinfo=timezone.utc)
        standard = await loans.create(LoanCreate(
            partner_id=created[0].id,
            total_amount=Decimal("1200"),
            number_of_installments=12,
            interest_rate=Decimal("5"),
            start_date=start,
        ))
        await loans.create(LoanCreate(
            partner_id=created[1].id,
            loan_type=LoanType.CUSTOM,
            total_amount=Decimal("500"),
            number_of_installments=5,
            fixed_interest_amount=Decimal("10"),
            start_date=start,
        ))
        revolving = await loans.create(LoanCreate(
            partner_id=created[2].id,
            loan_type=LoanType.CUSTOM,
            total_amount=Decimal("800"),
            number_of_installments=0,
            start_date=start,
        ))

        payments = PaymentRepository(db)
        installments = await loans.get_installments(standard.id)
        await payments.pay_installments(
            standard.id,
            [inst.id for inst in installments[:3]],
            datetime(2024, 4, 15, tzinfo=timezone.utc),
        )
        await payments.register_contribution(
            revolving.id, created[2].id, Decimal("150"), datetime(2024, 3, 1, tzinfo=timezone.utc),
        )

        report = await OverdueSweeper(db).sweep()
        logger.info("Seeded %d partners and 3 loans; %s", len(created), report.message)


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    asyncio.run(seed_data())
