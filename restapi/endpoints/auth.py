"""Authentication endpoints for operator login, registration and PIN unlock."""

from datetime import timedelta
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.init_db import get_db
from components.core.logging import get_logger
from components.core.security import (
    create_access_token,
    verify_password,
    verify_pin,
    verify_token,
)
from components.user.models import User
from components.user.repository import UserRepository
from components.user.schemas import PinUnlock, UserCreate, User as UserSchema, UserWithToken

router = APIRouter(prefix="/auth", tags=["authentication"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
logger = get_logger(__name__)


def _token_for(user: User) -> UserWithToken:
    expires = timedelta(minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(data={"sub": str(user.id)}, expires_delta=expires)
    return UserWithToken(
        **UserSchema.model_validate(user).model_dump(),
        access_token=access_token,
    )


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """Get current operator from JWT token."""
    payload = verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserRepository(db).get_by_id(payload.get("sub"))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("/register", response_model=UserWithToken)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Create new operator and return JWT token."""
    repo = UserRepository(db)
    if await repo.exists(user_in.login):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Login already registered",
        )
    user = await repo.create(user_in)
    return _token_for(user)


@router.post("/login", response_model=UserWithToken)
async def login(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """Login operator and return JWT token."""
    user = await UserRepository(db).get_by_login(form_data.username)
    if not user or not verify_password(form_data.password, user.password):
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect login or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)


@router.post("/unlock", response_model=UserWithToken)
async def unlock(
    body: PinUnlock,
    current_user: User = Depends(get_current_user)
) -> Any:
    """Unlock the locked screen with the operator's PIN and issue a fresh token."""
    if not verify_pin(body.pin, current_user.pin):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect PIN",
        )
    return _token_for(current_user)
