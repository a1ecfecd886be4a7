"""Receipt model for the database."""

import enum

from sqlalchemy import Column, String, Numeric, JSON

from components.core.database import Base, new_id


class ReceiptType(str, enum.Enum):
    LOAN_GRANT = "loan_grant"
    INSTALLMENT_PAYMENT = "installment_payment"


class Receipt(Base):
    """Receipt model, written once when a loan is granted or an installment is paid."""
    __tablename__ = "receipts"

    id = Column(String(32), primary_key=True, default=new_id)
    type = Column(String(30), nullable=False)
    partner_id = Column(String(32), nullable=False, index=True)
    loan_id = Column(String(32), nullable=False, index=True)
    payment_id = Column(String(32), nullable=True)
    installment_id = Column(String(32), nullable=True)
    generation_date = Column(String(40), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    partner_name = Column(String(201), nullable=False, default="")
    partner_identification = Column(String(50), nullable=False, default="")
    # Loan terms for loan_grant, installment breakdown for installment_payment
    details = Column(JSON, nullable=False, default=dict)
