# wellness/models/user.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from anyio import to_thread
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, EmailStr, Field
from pymongo.errors import DuplicateKeyError

from ..core.errors import ConflictError
from ..core.security import hash_password


# ---------- Pydantic ----------
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class UserPublic(BaseModel):
    id: str
    email: EmailStr


def sanitize_email(email: str) -> str:
    return email.strip().lower()


# ---------- Repo ----------
class UserRepo:
    def __init__(self, db):
        self.col = db["users"]

    async def create(self, data: UserCreate) -> UserPublic:
        doc: Dict[str, Any] = {
            "email": sanitize_email(str(data.email)),
            "password_hash": hash_password(data.password),
            "created_at": datetime.now(timezone.utc).replace(tzinfo=None),
        }

        def _insert() -> str:
            res = self.col.insert_one(doc)
            return str(res.inserted_id)

        try:
            inserted_id = await to_thread.run_sync(_insert)
        except DuplicateKeyError:
            raise ConflictError("Email is already registered") from None
        return UserPublic(id=inserted_id, email=doc["email"])

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Returns the full document (password_hash included). Meant for login.
        """
        def _find() -> Optional[Dict[str, Any]]:
            d = self.col.find_one({"email": sanitize_email(email)})
            if not d:
                return None
            d["_id"] = str(d["_id"])
            return d

        return await to_thread.run_sync(_find)

    async def get_by_id(self, user_id: str) -> Optional[UserPublic]:
        def _find() -> Optional[UserPublic]:
            try:
                oid = ObjectId(user_id)
            except (InvalidId, TypeError):
                return None
            d = self.col.find_one({"_id": oid})
            if not d:
                return None
            return UserPublic(id=str(d["_id"]), email=d["email"])

        return await to_thread.run_sync(_find)
