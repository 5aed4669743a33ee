"""
Submission coordinator: submit-or-enqueue, and replay of the offline queue
when connectivity comes back.

    IDLE -> CHECKING_CONNECTIVITY -> SUBMITTING | ENQUEUING
         -> SUCCEEDED | QUEUED_OFFLINE | FAILED

Only this module turns a NetworkError into the QUEUED_OFFLINE outcome.
"""
from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Callable, Optional

from pydantic import BaseModel

from ..core.errors import NetworkError, WellnessError
from ..models.assessment import AssessmentRecord, AssessmentSubmission
from ..services.risk_model import ScoredResult, preview
from .api import WellnessApiClient
from .connectivity import ConnectivitySignal
from .offline_queue import DrainResult, OfflineQueue

if TYPE_CHECKING:
    from .history import HistorySynchronizer

log = logging.getLogger(__name__)


class SubmissionState(str, enum.Enum):
    IDLE = "idle"
    CHECKING_CONNECTIVITY = "checking_connectivity"
    SUBMITTING = "submitting"
    ENQUEUING = "enqueuing"
    SUCCEEDED = "succeeded"
    QUEUED_OFFLINE = "queued_offline"
    FAILED = "failed"


class SubmitOutcome(BaseModel):
    state: SubmissionState
    record: Optional[AssessmentRecord] = None

    @property
    def queued_offline(self) -> bool:
        return self.state is SubmissionState.QUEUED_OFFLINE


class SubmissionCoordinator:
    def __init__(
        self,
        api: WellnessApiClient,
        queue: OfflineQueue,
        connectivity: ConnectivitySignal,
        history: Optional["HistorySynchronizer"] = None,
    ) -> None:
        self.api = api
        self.queue = queue
        self.connectivity = connectivity
        self.history = history
        self.state = SubmissionState.IDLE
        self.last_failed: Optional[AssessmentSubmission] = None
        self._draining = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def draining(self) -> bool:
        return self._draining

    @staticmethod
    def preview(submission: AssessmentSubmission) -> ScoredResult:
        """Local, non-authoritative result for immediate feedback."""
        return preview(submission.responses)

    async def submit(self, submission: AssessmentSubmission) -> SubmitOutcome:
        """
        Sends the submission, or queues it when offline / unreachable.
        Server rejections (validation, auth, ...) are re-raised with the
        state set to FAILED and are never queued.
        """
        self.state = SubmissionState.CHECKING_CONNECTIVITY
        if not self.connectivity.is_online():
            return await self._enqueue(submission)

        self.state = SubmissionState.SUBMITTING
        try:
            record = await self.api.submit(submission)
        except NetworkError as exc:
            log.info("submit failed on the network, queueing: %s", exc)
            return await self._enqueue(submission)
        except Exception as exc:
            self.state = SubmissionState.FAILED
            self.last_failed = submission
            log.warning("submission rejected: %s", exc)
            raise

        self.state = SubmissionState.SUCCEEDED
        self.last_failed = None
        if self.history is not None:
            self.history.after_submit(record)
        return SubmitOutcome(state=self.state, record=record)

    async def retry(self) -> SubmitOutcome:
        """Re-invokes submit() with the exact submission that last failed."""
        if self.last_failed is None:
            raise RuntimeError("no failed submission to retry")
        return await self.submit(self.last_failed)

    async def _enqueue(self, submission: AssessmentSubmission) -> SubmitOutcome:
        self.state = SubmissionState.ENQUEUING
        try:
            await self.queue.enqueue(submission, owner_id=self.api.credentials.user_id())
        except Exception:
            self.state = SubmissionState.FAILED
            self.last_failed = submission
            raise
        self.state = SubmissionState.QUEUED_OFFLINE
        return SubmitOutcome(state=self.state)

    async def _replay(self, submission: AssessmentSubmission) -> AssessmentRecord:
        return await self.api.submit(submission)

    async def reconcile_on_reconnect(self) -> Optional[DrainResult]:
        """
        Drains the offline queue for the signed-in user. Returns None without
        doing anything when a drain is already in flight. Errors propagate
        here; the connectivity listener logs them instead.
        """
        if self._draining:
            log.debug("drain already in flight, skipping")
            return None
        self._draining = True
        try:
            result = await self.queue.drain(self._replay, owner_id=self.api.credentials.user_id())
        finally:
            self._draining = False

        if result.synced and self.history is not None:
            await self.history.refresh()
        return result

    # ---------- connectivity ----------
    def attach(self, signal: Optional[ConnectivitySignal] = None) -> None:
        """Replays the queue every time the signal transitions to online."""
        self.detach()
        if signal is not None:
            self.connectivity = signal
        self._unsubscribe = self.connectivity.subscribe(self._on_connectivity_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _on_connectivity_change(self, online: bool) -> None:
        if not online:
            return
        if not self.api.credentials.token():
            log.info("back online but signed out, queue replay waits for sign-in")
            return
        try:
            await self.reconcile_on_reconnect()
        except WellnessError as exc:
            log.warning("queue replay after reconnect failed: %s (%s)", exc.kind, exc)
