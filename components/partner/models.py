"""Partner model for the database."""

from sqlalchemy import Column, String

from components.core.database import Base, new_id


class Partner(Base):
    """Partner model representing a cooperative member."""
    __tablename__ = "partners"

    id = Column(String(32), primary_key=True, default=new_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    identification_number = Column(String(50), nullable=False, default="")
    alias = Column(String(100), nullable=False, default="")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
