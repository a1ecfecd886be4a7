"""Security utilities for JWT, password and PIN handling."""

from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import os
from jose import JWTError, jwt
from components.core.config import get_settings

settings = get_settings()

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password (or PIN) against its hash."""
    try:
        salt, _ = hashed_password.split(':')
    except ValueError:
        return False
    return get_password_hash(plain_password, salt) == hashed_password


def get_password_hash(password: str, salt: Optional[str] = None) -> str:
    """Generate password hash using SHA256 with salt."""
    if salt is None:
        salt = os.urandom(32).hex()
    hash_obj = hashlib.sha256()
    hash_obj.update(salt.encode())
    hash_obj.update(password.encode())
    return f"{salt}:{hash_obj.hexdigest()}"


def verify_pin(plain_pin: str, hashed_pin: Optional[str]) -> bool:
    """Check a lock-screen PIN; operators without one use the configured default."""
    if not hashed_pin:
        return plain_pin == settings.DEFAULT_PIN
    return verify_password(plain_pin, hashed_pin)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
