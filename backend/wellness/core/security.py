"""
Security helpers: password hashing and JWT.
- bcrypt through passlib for password hashes.
- HS256 JWT whose `sub` is the user id (the owner id of every assessment).
"""
from datetime import datetime, timedelta, timezone
from typing import Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from ..core.config import settings
from ..core.errors import AuthError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGO = "HS256"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def create_jwt(user_id: str, expires_minutes: int | None = None) -> str:
    exp_min = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRES_MIN
    now = datetime.now(tz=timezone.utc)
    to_encode = {
        "sub": user_id,
        "exp": now + timedelta(minutes=exp_min),
        "iat": now,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=ALGO)

def decode_jwt(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGO])
    except JWTError as exc:
        raise AuthError("Invalid or expired token") from exc
    if not payload.get("sub"):
        raise AuthError("Invalid or expired token")
    return payload
