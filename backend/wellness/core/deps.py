"""
Common FastAPI dependencies:
- current_db
- current_user (via Authorization: Bearer <token>)
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from ..db.mongo import get_db
from ..core.errors import AuthError
from ..core.security import decode_jwt

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def current_db():
    return get_db()

async def current_user(token: Optional[str] = Depends(oauth2_scheme)) -> dict:
    """The owner id always comes from the token, never from the request body."""
    if not token:
        raise AuthError("Authorization token missing")
    payload = decode_jwt(token)
    return {"sub": payload["sub"]}
