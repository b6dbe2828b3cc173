from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import AbsenceRequest


class AbsenceRequestRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        class_id: Optional[int],
        absence_date: date,
        reason: str,
        submitted_by: int,
    ) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[AbsenceRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        student_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[AbsenceRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
        attendance_record_id: Optional[int] = None,
    ) -> bool:
        """Only pending requests can be decided; returns False otherwise."""

        raise NotImplementedError
