from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_actor, require_non_empty
from ..core.enums import AttendanceStatus, RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, PersistenceFailure, ValidationError
from .model import AbsenceRequest
from .repository import AbsenceRequestRepository

logger = logging.getLogger(__name__)


class AbsenceApprovalService:
    """Guardian excuse requests, applied to attendance with the same upsert key as teacher submissions."""

    def __init__(self, requests: AbsenceRequestRepository, attendance: AttendanceRepository):
        self._requests = requests
        self._attendance = attendance

    def create_request(
        self,
        *,
        current_role: Role,
        actor_id: int,
        student_id: int,
        class_id: Optional[int],
        absence_date: date,
        reason: str,
    ) -> int:
        submitted_by = require_actor(actor_id)
        if current_role not in {Role.PARENT, Role.ADMIN}:
            raise AuthorizationError("Only guardians can submit absence requests")

        reason = require_non_empty(reason, "Reason")
        return self._requests.create(
            student_id=int(student_id),
            class_id=class_id,
            absence_date=absence_date,
            reason=reason,
            submitted_by=submitted_by,
        )

    def _pending_request(self, request_id: int) -> AbsenceRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Absence request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Absence request was already reviewed")
        return req

    def approve_absence(
        self,
        *,
        current_role: Role,
        reviewer_id: int,
        request_id: int,
        reviewer_notes: str = "",
    ) -> AttendanceRecord:
        reviewer_id = require_actor(reviewer_id)
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        req = self._pending_request(request_id)

        existing = self._attendance.find_one(student_id=req.student_id, attendance_date=req.absence_date)
        record = AttendanceRecord.new(
            student_id=req.student_id,
            attendance_date=req.absence_date,
            teacher_id=existing.teacher_id if existing else reviewer_id,
            class_id=req.class_id if req.class_id is not None else (existing.class_id if existing else None),
            status=AttendanceStatus.EXCUSED,
        )

        unit_key = f"absence:{req.student_id}:{req.absence_date.isoformat()}"
        try:
            saved = list(self._attendance.upsert_many([record]))
        except Exception as exc:
            logger.error("Applying absence request %s failed: %s", req.request_id, exc)
            raise PersistenceFailure(unit_key, f"Saving excused attendance failed: {exc}") from exc
        if not saved:
            raise PersistenceFailure(unit_key, "Saving excused attendance returned no record")
        attendance_record = saved[0]

        decided = self._requests.decide(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            reviewed_by=reviewer_id,
            reviewed_at=now_local(),
            review_notes=(reviewer_notes or "").strip() or None,
            attendance_record_id=attendance_record.record_id,
        )
        if not decided:
            raise ValidationError("Approving the absence request failed")

        logger.info(
            "Absence request %s approved by %s; student %s excused on %s",
            req.request_id,
            reviewer_id,
            req.student_id,
            req.absence_date,
        )
        return attendance_record

    def reject_absence(
        self,
        *,
        current_role: Role,
        reviewer_id: int,
        request_id: int,
        notes: str,
    ) -> None:
        reviewer_id = require_actor(reviewer_id)
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        notes = require_non_empty(notes, "A reason for rejection")
        req = self._pending_request(request_id)

        decided = self._requests.decide(
            request_id=req.request_id,
            status=RequestStatus.REJECTED,
            reviewed_by=reviewer_id,
            reviewed_at=now_local(),
            review_notes=notes,
        )
        if not decided:
            raise ValidationError("Rejecting the absence request failed")

    def list_pending(self, *, limit: int = 500) -> Sequence[AbsenceRequest]:
        return self._requests.list_requests(status=RequestStatus.PENDING, limit=limit)

    def list_for_student(self, *, student_id: int, limit: int = 200) -> Sequence[AbsenceRequest]:
        return self._requests.list_requests(student_id=int(student_id), limit=limit)
