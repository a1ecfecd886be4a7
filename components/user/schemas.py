"""Pydantic schemas for operator accounts."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class UserBase(BaseModel):
    login: str = Field(..., min_length=3, max_length=50)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    pin: Optional[str] = Field(None, pattern=r"^\d{4,8}$")


class User(UserBase):
    id: str
    registration_date: date

    class Config:
        from_attributes = True


class UserWithToken(User):
    access_token: str
    token_type: str = "bearer"


class PinUnlock(BaseModel):
    pin: str
