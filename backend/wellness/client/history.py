"""
Client view of the user's active assessments, most recent first.
The server is authoritative: refresh() replaces the whole list.
"""
from __future__ import annotations

import logging
from typing import List

from ..models.assessment import AssessmentRecord, AssessmentStats
from .api import WellnessApiClient

log = logging.getLogger(__name__)


class HistorySynchronizer:
    def __init__(self, api: WellnessApiClient) -> None:
        self.api = api
        self._items: List[AssessmentRecord] = []

    @property
    def items(self) -> List[AssessmentRecord]:
        return list(self._items)

    async def refresh(self) -> List[AssessmentRecord]:
        self._items = await self.api.list_active()
        return self.items

    def after_submit(self, record: AssessmentRecord) -> None:
        self._items = [record] + [r for r in self._items if r.id != record.id]

    def after_delete(self, assessment_id: str) -> None:
        self._items = [r for r in self._items if r.id != assessment_id]

    async def delete(self, assessment_id: str) -> None:
        """
        Optimistic: the record disappears locally before the server answers.
        On failure the error propagates and the local view stays as is until
        the next refresh().
        """
        self.after_delete(assessment_id)
        try:
            await self.api.delete(assessment_id)
        except Exception as exc:
            log.warning("server delete of %s failed, local view is ahead: %s", assessment_id, exc)
            raise

    def clear(self) -> None:
        self._items = []

    def stats(self) -> AssessmentStats:
        return AssessmentStats.from_records(self._items)
