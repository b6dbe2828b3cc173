from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class AbsenceRequest:
    """A guardian's request to excuse a student from one lesson date."""

    request_id: int
    student_id: int
    class_id: Optional[int]
    absence_date: date
    reason: str
    status: RequestStatus
    submitted_by: int
    created_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    attendance_record_id: Optional[int] = None
