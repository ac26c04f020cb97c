# app/core/security.py
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.schemas.user import TokenData

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# Password hashing
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(data: dict, expire: datetime, token_type: str) -> str:
    payload = dict(data)
    payload.update({"exp": expire, "type": token_type})
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Create Access Token
def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return _encode(data, expire, ACCESS_TOKEN_TYPE)


# Create Refresh Token
def create_refresh_token(data: dict, expires_days: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(
        days=expires_days or settings.REFRESH_TOKEN_EXPIRE_DAYS
    )
    return _encode(data, expire, REFRESH_TOKEN_TYPE)


# Base decode
def _decode_raw(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _decode_typed(token: str, token_type: str) -> TokenData:
    payload = _decode_raw(token)
    if not payload or payload.get("type") != token_type:
        return TokenData()
    return TokenData(user_id=payload.get("sub"), role=payload.get("role"))


def decode_access_token(token: str) -> TokenData:
    return _decode_typed(token, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> TokenData:
    return _decode_typed(token, REFRESH_TOKEN_TYPE)
