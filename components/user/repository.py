"""Repository for operator accounts."""

from datetime import date
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.logging import get_logger
from components.core.security import get_password_hash
from components.user.models import User
from components.user.schemas import UserCreate

logger = get_logger(__name__)


class UserRepository:
    """Repository for operator accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: UserCreate) -> User:
        """Create a new operator."""
        db_user = User(
            login=user.login,
            password=get_password_hash(user.password),
            pin=get_password_hash(user.pin) if user.pin else None,
            registration_date=date.today(),
        )
        self.session.add(db_user)
        await self.session.commit()
        logger.info("Registered operator %s", db_user.login)
        return db_user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_login(self, login: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.login == login)
        )
        return result.scalar_one_or_none()

    async def exists(self, login: str) -> bool:
        """Check if an operator with given login exists."""
        result = await self.session.execute(
            select(User.id).where(User.login == login)
        )
        return result.scalar_one_or_none() is not None
