"""
Durable FIFO of submissions that could not reach the server.

The whole queue is one JSON blob in a KeyValueStorage. Every change is a
read-modify-write under a lock, written back with a single atomic replace.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from anyio import Lock, to_thread
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from ..core.errors import AuthError, NetworkError, StorageError, WellnessError
from ..models.assessment import AssessmentSubmission, QueuedSubmission
from .storage import KeyValueStorage

log = logging.getLogger(__name__)

QUEUE_KEY = "offline_queue"

_queue_adapter = TypeAdapter(List[QueuedSubmission])

SubmitFn = Callable[[AssessmentSubmission], Awaitable[object]]


class DrainResult(BaseModel):
    synced: int = 0
    remaining: int = 0
    dropped: int = 0


class OfflineQueue:
    def __init__(self, storage: KeyValueStorage, key: str = QUEUE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lock = Lock()

    # ---------- storage ----------
    async def _read(self) -> List[QueuedSubmission]:
        raw = await to_thread.run_sync(self._storage.get, self._key)
        if not raw:
            return []
        try:
            return _queue_adapter.validate_json(raw)
        except SchemaError as exc:
            raise StorageError(f"offline queue is unreadable: {exc}") from exc

    async def _write(self, items: List[QueuedSubmission]) -> None:
        if items:
            blob = _queue_adapter.dump_json(items).decode("utf-8")
            await to_thread.run_sync(self._storage.set, self._key, blob)
        else:
            await to_thread.run_sync(self._storage.remove, self._key)

    # ---------- public ----------
    async def enqueue(self, submission: AssessmentSubmission, owner_id: Optional[str] = None) -> QueuedSubmission:
        item = QueuedSubmission(
            submission=submission,
            queued_at=datetime.now(timezone.utc),
            owner_id=owner_id,
        )
        async with self._lock:
            items = await self._read()
            items.append(item)
            await self._write(items)
        log.info("queued submission for later (%d pending)", len(items))
        return item

    async def count(self) -> int:
        async with self._lock:
            return len(await self._read())

    async def pending(self) -> List[QueuedSubmission]:
        async with self._lock:
            return await self._read()

    async def clear(self) -> None:
        async with self._lock:
            await self._write([])

    async def drain(self, submit_fn: SubmitFn, owner_id: Optional[str] = None) -> DrainResult:
        """
        Replays a snapshot of the queue in order through submit_fn.

        Only items queued by `owner_id`, or queued while signed out, are
        replayed; items of other users stay queued in place. A NetworkError
        (or AuthError) stops the pass and keeps the failing item and
        everything after it. Any other domain error drops just that item.
        Items enqueued while the pass runs stay queued behind the remainder.
        """
        async with self._lock:
            snapshot = await self._read()

        synced = dropped = 0
        retained: List[QueuedSubmission] = []
        halt_exc: BaseException | None = None

        for index, item in enumerate(snapshot):
            if item.owner_id is not None and item.owner_id != owner_id:
                retained.append(item)
                continue
            try:
                await submit_fn(item.submission)
            except NetworkError as exc:
                log.info("drain stopped by network failure at item %d: %s", index + 1, exc)
                retained.extend(snapshot[index:])
                break
            except AuthError as exc:
                log.warning("drain stopped, credential rejected at item %d", index + 1)
                retained.extend(snapshot[index:])
                halt_exc = exc
                break
            except WellnessError as exc:
                dropped += 1
                log.warning(
                    "dropping queued submission from %s: %s (%s)",
                    item.queued_at.isoformat(), exc.kind, exc,
                )
                continue
            except Exception as exc:
                retained.extend(snapshot[index:])
                halt_exc = exc
                break
            synced += 1

        remaining = await self._commit(len(snapshot), retained)
        log.info("drain finished: synced=%d dropped=%d remaining=%d", synced, dropped, remaining)
        if halt_exc is not None:
            raise halt_exc
        return DrainResult(synced=synced, remaining=remaining, dropped=dropped)

    async def _commit(self, snapshot_len: int, retained: List[QueuedSubmission]) -> int:
        async with self._lock:
            current = await self._read()
            # only enqueue() touches the queue during a drain, and it appends
            items = retained + current[snapshot_len:]
            await self._write(items)
        return len(items)
