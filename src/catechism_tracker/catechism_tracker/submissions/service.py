from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceEntry, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.filters import RecordFilter
from ..common.validators import require_actor
from ..core.constants import DEFAULT_UNSYNCED_RETRY_LIMIT
from ..core.enums import AttendanceStatus, EvaluationCategory, Role, SyncStatus
from ..core.exceptions import AuthorizationError, EmptySubmission, PersistenceFailure, ValidationError
from ..evaluations.model import EvaluationEntry, EvaluationRecord
from ..evaluations.repository import EvaluationRepository
from ..sheets.adapter import SheetSyncAdapter
from ..sheets.model import SheetRow
from ..sheets.rows import attendance_rows, evaluation_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """What a caller needs to tell "saved and mirrored" from "saved, mirror stale"."""

    saved: Tuple[Any, ...]
    sync_status: SyncStatus
    failed_keys: Tuple[Hashable, ...] = ()
    sync_error: Optional[str] = None

    @property
    def fully_synced(self) -> bool:
        return self.sync_status == SyncStatus.SYNCED


class RecordSubmissionService:
    """Save-then-sync for one submission event.

    The record store is authoritative: a failed upsert fails the call and the
    sheet is never touched. A failed sheet write only leaves records with
    `synced_to_sheets=False`, which `retry_unsynced_*` picks up later.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        evaluations: EvaluationRepository,
        sheets: SheetSyncAdapter,
        *,
        retry_limit: int = DEFAULT_UNSYNCED_RETRY_LIMIT,
    ):
        self._attendance = attendance
        self._evaluations = evaluations
        self._sheets = sheets
        self._retry_limit = int(retry_limit)

    # -------- Attendance --------
    def submit_attendance(
        self,
        *,
        current_role: Role,
        actor_id: int,
        class_id: Optional[int],
        attendance_date: date,
        entries: Sequence[AttendanceEntry],
    ) -> SubmissionResult:
        self._require_writer(current_role)
        teacher_id = require_actor(actor_id)

        by_student: Dict[int, AttendanceRecord] = {}
        for entry in entries:
            raw = (entry.status or "").strip()
            if not raw:
                continue
            try:
                status = AttendanceStatus(raw)
            except ValueError:
                raise ValidationError(f"Unknown attendance status {raw!r} for student {entry.student_id}")
            by_student[int(entry.student_id)] = AttendanceRecord.new(
                student_id=entry.student_id,
                attendance_date=attendance_date,
                teacher_id=teacher_id,
                class_id=class_id,
                status=status,
            )

        if not by_student:
            raise EmptySubmission("Please mark attendance for at least one student")

        unit_key = f"attendance:{class_id}:{attendance_date.isoformat()}"
        saved = self._persist(self._attendance, list(by_student.values()), unit_key)
        logger.info("Saved %d attendance records for %s", len(saved), unit_key)
        return self._sync(self._attendance, saved, attendance_rows(saved))

    def retry_unsynced_attendance(
        self, *, current_role: Role, actor_id: int, teacher_id: Optional[int] = None
    ) -> SubmissionResult:
        self._require_writer(current_role)
        owner = require_actor(teacher_id if teacher_id is not None else actor_id)
        pending = list(self._attendance.list_unsynced(teacher_id=owner, limit=self._retry_limit))
        if not pending:
            return SubmissionResult(saved=(), sync_status=SyncStatus.SYNCED)
        logger.info("Retrying sheet sync for %d attendance records of teacher %s", len(pending), owner)
        return self._sync(self._attendance, pending, attendance_rows(pending))

    def sync_attendance_records(self, records: Sequence[AttendanceRecord]) -> SubmissionResult:
        """Mirror records that are already committed, e.g. an approved absence.

        Never raises: the records stay unsynced for the next retry instead.
        """

        saved = list(records)
        if not saved:
            return SubmissionResult(saved=(), sync_status=SyncStatus.SYNCED)
        try:
            return self._sync(self._attendance, saved, attendance_rows(saved))
        except Exception as exc:
            logger.exception("Sheet sync for %d committed attendance records failed", len(saved))
            return SubmissionResult(
                saved=tuple(saved),
                sync_status=SyncStatus.PARTIAL_SYNC_FAILURE,
                failed_keys=tuple(r.key for r in saved),
                sync_error=str(exc),
            )

    # -------- Evaluations --------
    def submit_evaluation(
        self,
        *,
        current_role: Role,
        actor_id: int,
        class_id: Optional[int],
        chapter_number: int,
        entries: Sequence[EvaluationEntry],
    ) -> SubmissionResult:
        self._require_writer(current_role)
        teacher_id = require_actor(actor_id)
        if int(chapter_number) < 1:
            raise ValidationError("Chapter number must be a positive integer")

        by_student: Dict[int, EvaluationRecord] = {}
        for entry in entries:
            ratings: Dict[EvaluationCategory, str] = {}
            for category, rating in (entry.ratings or {}).items():
                value = (rating or "").strip()
                if not value:
                    continue
                try:
                    ratings[EvaluationCategory(category)] = value
                except ValueError:
                    raise ValidationError(f"Unknown evaluation category {category!r}")
            if not ratings:
                continue
            by_student[int(entry.student_id)] = EvaluationRecord(
                student_id=int(entry.student_id),
                chapter_number=int(chapter_number),
                teacher_id=teacher_id,
                class_id=class_id,
                ratings=ratings,
            )

        if not by_student:
            raise EmptySubmission("Please evaluate at least one student in one category")

        unit_key = f"evaluation:{class_id}:chapter-{int(chapter_number)}"
        saved = self._persist(self._evaluations, list(by_student.values()), unit_key)
        logger.info("Saved %d evaluation records for %s", len(saved), unit_key)
        return self._sync(self._evaluations, saved, evaluation_rows(saved))

    def retry_unsynced_evaluations(
        self, *, current_role: Role, actor_id: int, teacher_id: Optional[int] = None
    ) -> SubmissionResult:
        self._require_writer(current_role)
        owner = require_actor(teacher_id if teacher_id is not None else actor_id)
        pending = list(self._evaluations.list_unsynced(teacher_id=owner, limit=self._retry_limit))
        if not pending:
            return SubmissionResult(saved=(), sync_status=SyncStatus.SYNCED)
        logger.info("Retrying sheet sync for %d evaluation records of teacher %s", len(pending), owner)
        return self._sync(self._evaluations, pending, evaluation_rows(pending))

    # -------- Listing --------
    def list_attendance(
        self, *, current_role: Role, actor_id: int, record_filter: RecordFilter
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_by_filter(self._scoped(current_role, actor_id, record_filter))

    def list_evaluations(
        self, *, current_role: Role, actor_id: int, record_filter: RecordFilter
    ) -> Sequence[EvaluationRecord]:
        return self._evaluations.list_by_filter(self._scoped(current_role, actor_id, record_filter))

    @staticmethod
    def _scoped(current_role: Role, actor_id: int, record_filter: RecordFilter) -> RecordFilter:
        actor_id = require_actor(actor_id)
        if current_role == Role.ADMIN:
            return record_filter
        if current_role == Role.TEACHER:
            # Teachers only see what they submitted themselves.
            return replace(record_filter, teacher_id=actor_id)
        raise AuthorizationError("You do not have permission")

    @staticmethod
    def _require_writer(current_role: Role) -> None:
        if current_role not in (Role.TEACHER, Role.ADMIN):
            raise AuthorizationError("You do not have permission")

    # -------- Shared steps --------
    @staticmethod
    def _persist(repo, records: List[Any], unit_key: str) -> List[Any]:
        try:
            return list(repo.upsert_many(records))
        except Exception as exc:
            logger.error("Persisting %s failed: %s", unit_key, exc)
            raise PersistenceFailure(unit_key, f"Saving records failed: {exc}") from exc

    def _sync(self, repo, saved: List[Any], rows: Sequence[SheetRow]) -> SubmissionResult:
        keys = [r.key for r in saved]

        try:
            result = self._sheets.write_batch(rows)
        except Exception as exc:
            logger.warning("Sheet sync failed for %d records: %s", len(keys), exc)
            self._record_sync_failure(repo, keys, str(exc))
            return SubmissionResult(
                saved=tuple(saved),
                sync_status=SyncStatus.PARTIAL_SYNC_FAILURE,
                failed_keys=tuple(keys),
                sync_error=str(exc),
            )

        if result.ok:
            failed_keys: List[Hashable] = []
        elif result.failed_rows:
            failed_set = {row.record_key for row in result.failed_rows}
            failed_keys = [k for k in keys if k in failed_set]
        else:
            failed_keys = list(keys)

        failed_set = set(failed_keys)
        synced_keys = [k for k in keys if k not in failed_set]

        marked = False
        if synced_keys:
            try:
                repo.mark_synced(synced_keys)
                marked = True
            except Exception:
                # The sheet already has the data; the flag will be fixed by the next retry.
                logger.exception("Marking %d records as synced failed", len(synced_keys))

        synced_set = set(synced_keys) if marked else set()
        out = tuple(r.marked_synced() if r.key in synced_set else r for r in saved)

        if failed_keys:
            error = result.error or "Spreadsheet rejected some rows"
            logger.warning("Sheet sync left %d of %d records unsynced: %s", len(failed_keys), len(keys), error)
            self._record_sync_failure(repo, failed_keys, error)
            return SubmissionResult(
                saved=out,
                sync_status=SyncStatus.PARTIAL_SYNC_FAILURE,
                failed_keys=tuple(failed_keys),
                sync_error=error,
            )

        return SubmissionResult(saved=out, sync_status=SyncStatus.SYNCED)

    @staticmethod
    def _record_sync_failure(repo, keys: Sequence[Hashable], error: str) -> None:
        try:
            repo.mark_sync_failed(list(keys), error)
        except Exception:
            logger.exception("Recording sync error for %d records failed", len(keys))
