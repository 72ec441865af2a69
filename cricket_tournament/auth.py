"""
Minimal admin auth: one configured admin principal, hashed password and JWT.
No user accounts. The plain admin password is hashed once at import and never kept around.
"""
from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import JWTError, jwt

from cricket_tournament import config

# pbkdf2_sha256 avoids the bcrypt backend and its 72-byte password limit
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGORITHM = "HS256"
ADMIN_SCOPE = "admin"

_admin_password_hash = pwd_context.hash(config.ADMIN_PASSWORD)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def authenticate_admin(username: str, password: str) -> bool:
    if not hmac.compare_digest(username, config.ADMIN_USERNAME):
        return False
    return verify_password(password, _admin_password_hash)


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    minutes = config.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {"sub": subject, "scope": ADMIN_SCOPE, "exp": expire}
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> str | None:
    """Subject of a valid admin token, else None."""
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("scope") != ADMIN_SCOPE:
        return None
    return payload.get("sub")
