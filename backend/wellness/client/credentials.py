"""
Credential providers for the client. The bearer token is passed explicitly
to the API client instead of living in a module-level global.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from ..core.errors import StorageError
from .storage import KeyValueStorage

log = logging.getLogger(__name__)

SESSION_KEY = "session"


@runtime_checkable
class CredentialProvider(Protocol):
    def token(self) -> Optional[str]:
        ...

    def user_id(self) -> Optional[str]:
        ...


class StoredSession(BaseModel):
    token: str
    user: Optional[dict] = None


class StaticCredentials:
    def __init__(self, token: Optional[str], user_id: Optional[str] = None) -> None:
        self._token = token
        self._user_id = user_id

    def token(self) -> Optional[str]:
        return self._token

    def user_id(self) -> Optional[str]:
        return self._user_id


class SessionCredentials:
    """
    Mutable session: set after login/register, cleared on sign-out.
    Optionally persisted so the app stays signed in across restarts.
    """

    def __init__(self, storage: KeyValueStorage | None = None) -> None:
        self._storage = storage
        self._token: Optional[str] = None
        self.user: Optional[dict] = None
        if storage is not None:
            raw = storage.get(SESSION_KEY)
            if raw:
                try:
                    saved = StoredSession.model_validate_json(raw)
                except SchemaError as exc:
                    raise StorageError(f"saved session is unreadable: {exc}") from exc
                self._token, self.user = saved.token, saved.user

    def token(self) -> Optional[str]:
        return self._token

    def user_id(self) -> Optional[str]:
        if not self.user:
            return None
        return self.user.get("id")

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def sign_in(self, token: str, user: dict | None = None) -> None:
        self._token, self.user = token, user
        if self._storage is not None:
            self._storage.set(SESSION_KEY, StoredSession(token=token, user=user).model_dump_json())

    def sign_out(self) -> None:
        self._token, self.user = None, None
        if self._storage is not None:
            self._storage.remove(SESSION_KEY)
        log.info("signed out")
