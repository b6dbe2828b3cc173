from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Tuple

from ..common.datetime_utils import column_identifier
from ..core.enums import AttendanceStatus

AttendanceKey = Tuple[int, date]


@dataclass(frozen=True)
class AttendanceEntry:
    """One student's mark as submitted by a teacher; empty status means unmarked."""

    student_id: int
    status: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance on one lesson date.

    Unique per (student_id, attendance_date).
    """

    student_id: int
    attendance_date: date
    teacher_id: int
    class_id: Optional[int]
    status: AttendanceStatus
    column_identifier: str
    synced_to_sheets: bool = False
    sync_error: Optional[str] = None
    record_id: Optional[int] = None

    @property
    def key(self) -> AttendanceKey:
        return (self.student_id, self.attendance_date)

    @classmethod
    def new(
        cls,
        *,
        student_id: int,
        attendance_date: date,
        teacher_id: int,
        class_id: Optional[int],
        status: AttendanceStatus,
    ) -> "AttendanceRecord":
        return cls(
            student_id=int(student_id),
            attendance_date=attendance_date,
            teacher_id=int(teacher_id),
            class_id=class_id,
            status=status,
            column_identifier=column_identifier(attendance_date),
        )

    def marked_synced(self) -> "AttendanceRecord":
        return replace(self, synced_to_sheets=True, sync_error=None)
