from __future__ import annotations

from typing import Optional, Protocol, Sequence, Set

from ..common.filters import RecordFilter
from .model import EvaluationKey, EvaluationRecord


class EvaluationRepository(Protocol):
    def upsert_many(self, records: Sequence[EvaluationRecord]) -> Sequence[EvaluationRecord]:
        """Insert or replace by (student_id, chapter_number); returns the stored rows."""

        raise NotImplementedError

    def find_one(self, *, student_id: int, chapter_number: int) -> Optional[EvaluationRecord]:
        raise NotImplementedError

    def list_by_filter(self, record_filter: RecordFilter) -> Sequence[EvaluationRecord]:
        raise NotImplementedError

    def list_chapters_for_teacher(self, *, teacher_id: int) -> Set[int]:
        raise NotImplementedError

    def list_distinct_chapters(self) -> Sequence[int]:
        """Every chapter that has at least one evaluation, ascending."""

        raise NotImplementedError

    def mark_synced(self, keys: Sequence[EvaluationKey]) -> int:
        raise NotImplementedError

    def mark_sync_failed(self, keys: Sequence[EvaluationKey], error: str) -> int:
        raise NotImplementedError

    def list_unsynced(self, *, teacher_id: int, limit: int) -> Sequence[EvaluationRecord]:
        raise NotImplementedError
