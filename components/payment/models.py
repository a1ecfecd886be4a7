"""Payment model for the database."""

import enum

from sqlalchemy import Column, String, Numeric, JSON

from components.core.database import Base, new_id


class PaymentType(str, enum.Enum):
    INSTALLMENT_PAYMENT = "installment_payment"
    INDIVIDUAL_CONTRIBUTION = "individual_contribution"


class Payment(Base):
    """Payment model for money received against a loan."""
    __tablename__ = "payments"

    id = Column(String(32), primary_key=True, default=new_id)
    partner_id = Column(String(32), nullable=False, index=True)
    # No foreign key: payment history outlives deleted loans
    loan_id = Column(String(32), nullable=True, index=True)
    installment_ids = Column(JSON, nullable=False, default=list)
    # Legacy records may hold dd/mm/yyyy strings here
    payment_date = Column(String(40), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=True)
    capital_amount = Column(Numeric(12, 2), nullable=True)
    interest_amount = Column(Numeric(12, 2), nullable=True)
    partner_name = Column(String(201), nullable=False, default="")
    type = Column(String(30), nullable=False, default=PaymentType.INSTALLMENT_PAYMENT.value)
