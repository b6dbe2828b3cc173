from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .absences.mysql_absence_repository import MySQLAbsenceRequestRepository
from .absences.repository import AbsenceRequestRepository
from .absences.service import AbsenceApprovalService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .common.datetime_utils import parse_iso_date
from .core.constants import (
    ATTENDANCE_HIGH_MISSING_THRESHOLD,
    DEFAULT_RECONCILE_MAX_WORKERS,
    DEFAULT_RECONCILE_WINDOW_MONTHS,
    DEFAULT_SHEETS_HEADER_ROW,
    DEFAULT_SHEETS_TERM_START,
    DEFAULT_UNSYNCED_RETRY_LIMIT,
    EVALUATION_HIGH_MISSING_THRESHOLD,
)
from .database.connection import DatabaseConnection
from .evaluations.mysql_evaluation_repository import MySQLEvaluationRepository
from .evaluations.repository import EvaluationRepository
from .lessons.mysql_lesson_repository import MySQLLessonRepository
from .lessons.repository import LessonRepository
from .reconciliation.service import ReconciliationService
from .sheets.adapter import SheetSyncAdapter
from .sheets.gspread_adapter import GspreadSheetAdapter
from .sheets.mysql_sheet_directory import MySQLSheetDirectory
from .submissions.service import RecordSubmissionService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.repository import TeacherRepository


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    evaluations_repo: EvaluationRepository
    teachers_repo: TeacherRepository
    lessons_repo: LessonRepository
    absences_repo: AbsenceRequestRepository
    sheets: SheetSyncAdapter

    submission_service: RecordSubmissionService
    reconciliation_service: ReconciliationService
    absence_service: AbsenceApprovalService


def build_services(
    *,
    attendance_repo: AttendanceRepository,
    evaluations_repo: EvaluationRepository,
    teachers_repo: TeacherRepository,
    lessons_repo: LessonRepository,
    absences_repo: AbsenceRequestRepository,
    sheets: SheetSyncAdapter,
    settings: Optional[Any] = None,
) -> Container:
    """Wire services over the given repositories. Settings are read with defaults."""

    def setting(name: str, default):
        return getattr(settings, name, default) if settings is not None else default

    submission_service = RecordSubmissionService(
        attendance_repo,
        evaluations_repo,
        sheets,
        retry_limit=setting("UNSYNCED_RETRY_LIMIT", DEFAULT_UNSYNCED_RETRY_LIMIT),
    )
    reconciliation_service = ReconciliationService(
        attendance_repo,
        evaluations_repo,
        teachers_repo,
        lessons_repo,
        max_workers=setting("RECONCILE_MAX_WORKERS", DEFAULT_RECONCILE_MAX_WORKERS),
        window_months=setting("RECONCILE_WINDOW_MONTHS", DEFAULT_RECONCILE_WINDOW_MONTHS),
        attendance_high_threshold=setting("ATTENDANCE_ALERT_THRESHOLD", ATTENDANCE_HIGH_MISSING_THRESHOLD),
        evaluation_high_threshold=setting("EVALUATION_ALERT_THRESHOLD", EVALUATION_HIGH_MISSING_THRESHOLD),
    )
    absence_service = AbsenceApprovalService(absences_repo, attendance_repo)

    return Container(
        attendance_repo=attendance_repo,
        evaluations_repo=evaluations_repo,
        teachers_repo=teachers_repo,
        lessons_repo=lessons_repo,
        absences_repo=absences_repo,
        sheets=sheets,
        submission_service=submission_service,
        reconciliation_service=reconciliation_service,
        absence_service=absence_service,
    )


def build_container(*, db_config: dict, settings: Optional[Any] = None) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    term_start = getattr(settings, "SHEETS_TERM_START", None)
    sheets = GspreadSheetAdapter(
        MySQLSheetDirectory(conn),
        credentials_file=getattr(settings, "GOOGLE_SERVICE_ACCOUNT_FILE", None),
        header_row=int(getattr(settings, "SHEETS_HEADER_ROW", DEFAULT_SHEETS_HEADER_ROW)),
        term_start=parse_iso_date(term_start) if term_start else DEFAULT_SHEETS_TERM_START,
    )

    return build_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        evaluations_repo=MySQLEvaluationRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        lessons_repo=MySQLLessonRepository(conn),
        absences_repo=MySQLAbsenceRequestRepository(conn),
        sheets=sheets,
        settings=settings,
    )
