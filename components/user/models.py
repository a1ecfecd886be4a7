"""Back-office operator model for the database."""

from sqlalchemy import Column, String, Date

from components.core.database import Base, new_id


class User(Base):
    """Operator account that signs in to the back office."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    login = Column(String(50), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # Hashed password
    pin = Column(String(255), nullable=True)  # Hashed lock-screen PIN
    registration_date = Column(Date, nullable=False)
