"""
Wires the client pieces together from ClientSettings, the way a mobile or
desktop shell would use them.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .api import AuthSession, WellnessApiClient
from .config import ClientSettings
from .connectivity import ConnectivitySignal
from .coordinator import SubmissionCoordinator
from .credentials import SessionCredentials
from .history import HistorySynchronizer
from .offline_queue import OfflineQueue
from .storage import FileStorage, KeyValueStorage

log = logging.getLogger(__name__)


class WellnessClient:
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        storage: Optional[KeyValueStorage] = None,
        transport: httpx.AsyncBaseTransport | None = None,
        online: bool = True,
    ) -> None:
        self.settings = settings or ClientSettings()
        self.storage = storage if storage is not None else FileStorage(self.settings.QUEUE_DIR)
        self.session = SessionCredentials(self.storage)
        self.connectivity = ConnectivitySignal(online=online)
        self.api = WellnessApiClient(
            self.settings.API_URL,
            self.session,
            write_timeout=self.settings.WRITE_TIMEOUT,
            read_timeout=self.settings.READ_TIMEOUT,
            transport=transport,
        )
        self.queue = OfflineQueue(self.storage)
        self.history = HistorySynchronizer(self.api)
        self.coordinator = SubmissionCoordinator(self.api, self.queue, self.connectivity, self.history)
        self.coordinator.attach()

    async def __aenter__(self) -> "WellnessClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.coordinator.detach()
        await self.api.aclose()

    async def _start_session(self, auth: AuthSession) -> AuthSession:
        self.session.sign_in(auth.token, auth.user)
        if self.connectivity.is_online():
            result = await self.coordinator.reconcile_on_reconnect()
            # a drain that synced anything has already refreshed the history
            if result is None or not result.synced:
                await self.history.refresh()
        return auth

    async def register(self, email: str, password: str) -> AuthSession:
        return await self._start_session(await self.api.register(email, password))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await self._start_session(await self.api.login(email, password))

    def sign_out(self) -> None:
        self.session.sign_out()
        self.history.clear()
