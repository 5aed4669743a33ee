"""
Online/offline signal. The platform shell feeds it (network reachability
callbacks); listeners are awaited in subscription order on each transition.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List

log = logging.getLogger(__name__)

Listener = Callable[[bool], Awaitable[None]]


class ConnectivitySignal:
    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: List[Listener] = []

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_online(self, online: bool) -> None:
        """Records the new state; listeners only fire on an actual transition."""
        if online == self._online:
            return
        self._online = online
        log.info("connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            await listener(online)
