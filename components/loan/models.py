"""Loan and installment models for the database."""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric

from components.core.database import Base, new_id


class LoanType(str, enum.Enum):
    STANDARD = "standard"
    CUSTOM = "custom"


class LoanStatus(str, enum.Enum):
    ACTIVE = "Active"
    OVERDUE = "Overdue"
    FINISHED = "Finalizado"


class InstallmentStatus(str, enum.Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"


class Loan(Base):
    """Loan model representing a credit extended to one partner."""
    __tablename__ = "loans"

    id = Column(String(32), primary_key=True, default=new_id)
    partner_id = Column(String(32), ForeignKey("partners.id"), nullable=False, index=True)
    partner_name = Column(String(201), nullable=False, default="")
    loan_type = Column(String(20), nullable=False, default=LoanType.STANDARD.value)
    # Outstanding principal; lowered by individual contributions only
    total_amount = Column(Numeric(12, 2), nullable=False)
    start_date = Column(String(40), nullable=False)
    number_of_installments = Column(Integer, nullable=False, default=0)
    interest_rate = Column(Numeric(7, 2), nullable=False, default=0)
    fixed_interest_amount = Column(Numeric(12, 2), nullable=True)
    status = Column(String(20), nullable=False, default=LoanStatus.ACTIVE.value, index=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {
        "version_id_col": version
    }


class Installment(Base):
    """Installment model for one scheduled obligation under a loan."""
    __tablename__ = "installments"

    id = Column(String(32), primary_key=True, default=new_id)
    loan_id = Column(String(32), ForeignKey("loans.id"), nullable=False, index=True)
    partner_id = Column(String(32), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    due_date = Column(String(40), nullable=False)
    status = Column(String(20), nullable=False, default=InstallmentStatus.PENDING.value, index=True)
    capital_amount = Column(Numeric(12, 2), nullable=False)
    interest_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(String(40), nullable=True)
    payment_id = Column(String(32), nullable=True)
    receipt_id = Column(String(32), nullable=True)
