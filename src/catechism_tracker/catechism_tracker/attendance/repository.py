from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Set

from ..common.filters import RecordFilter
from .model import AttendanceKey, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert_many(self, records: Sequence[AttendanceRecord]) -> Sequence[AttendanceRecord]:
        """Insert or replace by (student_id, attendance_date); returns the stored rows.

        An existing row gets the new teacher/class/status and its sync flag reset.
        """

        raise NotImplementedError

    def find_one(self, *, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_by_filter(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_dates_for_teacher(self, *, teacher_id: int, start_date: date, end_date: date) -> Set[date]:
        """Distinct dates on which the teacher saved any attendance."""

        raise NotImplementedError

    def mark_synced(self, keys: Sequence[AttendanceKey]) -> int:
        raise NotImplementedError

    def mark_sync_failed(self, keys: Sequence[AttendanceKey], error: str) -> int:
        raise NotImplementedError

    def list_unsynced(self, *, teacher_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Oldest first."""

        raise NotImplementedError
