from __future__ import annotations

import logging
from datetime import date, timedelta

import pytest

from src.catechism_tracker.catechism_tracker.attendance.model import AttendanceEntry, AttendanceRecord
from src.catechism_tracker.catechism_tracker.core.enums import AttendanceStatus, EvaluationCategory, Role, SyncStatus
from src.catechism_tracker.catechism_tracker.core.exceptions import (
    AuthorizationError,
    EmptySubmission,
    PersistenceFailure,
    SheetSyncError,
    ValidationError,
)
from src.catechism_tracker.catechism_tracker.evaluations.model import EvaluationEntry
from src.catechism_tracker.catechism_tracker.submissions.service import RecordSubmissionService
from tests.fakes import FakeSheets, InMemoryAttendanceRepo, InMemoryEvaluationRepo

LESSON = date(2025, 10, 5)


def _service():
    attendance = InMemoryAttendanceRepo()
    evaluations = InMemoryEvaluationRepo()
    sheets = FakeSheets()
    return RecordSubmissionService(attendance, evaluations, sheets), attendance, evaluations, sheets


def _submit(svc, *entries, actor_id=7, role=Role.TEACHER):
    return svc.submit_attendance(
        current_role=role,
        actor_id=actor_id,
        class_id=3,
        attendance_date=LESSON,
        entries=list(entries),
    )


def _evaluate(svc, chapter, *entries, role=Role.TEACHER):
    return svc.submit_evaluation(
        current_role=role,
        actor_id=7,
        class_id=3,
        chapter_number=chapter,
        entries=list(entries),
    )


def _excused(student_id):
    return AttendanceRecord.new(
        student_id=student_id,
        attendance_date=LESSON,
        teacher_id=7,
        class_id=3,
        status=AttendanceStatus.EXCUSED,
    )


def test_attendance_submission_saves_and_syncs():
    svc, attendance, _, sheets = _service()

    result = _submit(svc, AttendanceEntry(1, "P"), AttendanceEntry(2, "UM"), AttendanceEntry(3, ""))

    assert result.sync_status == SyncStatus.SYNCED
    assert result.fully_synced
    assert [r.student_id for r in result.saved] == [1, 2]
    assert all(r.synced_to_sheets for r in result.saved)
    assert attendance.rows[(2, LESSON)].status == AttendanceStatus.UNATTENDED_MASS
    assert attendance.rows[(1, LESSON)].column_identifier == "Oct/05"
    assert sheets.calls == 1
    assert [row.value for row in sheets.batches[0]] == ["P", "UM"]


def test_admin_may_submit_attendance():
    svc, attendance, _, _ = _service()
    _submit(svc, AttendanceEntry(1, "P"), actor_id=1, role=Role.ADMIN)
    assert attendance.rows[(1, LESSON)].teacher_id == 1


def test_parent_cannot_submit_or_retry():
    svc, attendance, evaluations, sheets = _service()

    with pytest.raises(AuthorizationError):
        _submit(svc, AttendanceEntry(1, "P"), actor_id=50, role=Role.PARENT)
    with pytest.raises(AuthorizationError):
        _evaluate(svc, 1, EvaluationEntry(1, {"D": "A"}), role=Role.PARENT)
    with pytest.raises(AuthorizationError):
        svc.retry_unsynced_attendance(current_role=Role.PARENT, actor_id=50, teacher_id=7)
    with pytest.raises(AuthorizationError):
        svc.retry_unsynced_evaluations(current_role=Role.PARENT, actor_id=50, teacher_id=7)

    assert attendance.upsert_calls == 0
    assert evaluations.upsert_calls == 0
    assert sheets.calls == 0


def test_resubmitting_same_date_updates_instead_of_duplicating():
    svc, attendance, _, _ = _service()
    _submit(svc, AttendanceEntry(1, "L"))
    first_id = attendance.rows[(1, LESSON)].record_id

    _submit(svc, AttendanceEntry(1, "P"))

    assert len(attendance.rows) == 1
    assert attendance.rows[(1, LESSON)].status == AttendanceStatus.PRESENT
    assert attendance.rows[(1, LESSON)].record_id == first_id


def test_last_entry_for_a_student_wins_within_one_submission():
    svc, attendance, _, _ = _service()
    _submit(svc, AttendanceEntry(1, "L"), AttendanceEntry(1, "E"))
    assert attendance.rows[(1, LESSON)].status == AttendanceStatus.EXCUSED


def test_submission_without_any_mark_is_rejected():
    svc, attendance, _, sheets = _service()
    with pytest.raises(EmptySubmission):
        _submit(svc, AttendanceEntry(1, ""), AttendanceEntry(2))
    assert attendance.upsert_calls == 0
    assert sheets.calls == 0


def test_unknown_status_code_is_rejected():
    svc, _, _, _ = _service()
    with pytest.raises(ValidationError):
        _submit(svc, AttendanceEntry(1, "X"))


def test_missing_actor_is_rejected():
    svc, _, _, _ = _service()
    with pytest.raises(AuthorizationError):
        _submit(svc, AttendanceEntry(1, "P"), actor_id=None)


def test_persistence_failure_never_touches_the_sheet():
    svc, attendance, _, sheets = _service()
    attendance.fail_upsert = RuntimeError("connection lost")

    with pytest.raises(PersistenceFailure) as err:
        _submit(svc, AttendanceEntry(1, "P"))

    assert err.value.unit_key == "attendance:3:2025-10-05"
    assert sheets.calls == 0


def test_sheet_outage_keeps_records_and_reports_partial_failure():
    svc, attendance, _, sheets = _service()
    sheets.fail_with = SheetSyncError("sheets unavailable")

    result = _submit(svc, AttendanceEntry(1, "P"), AttendanceEntry(2, "U"))

    assert result.sync_status == SyncStatus.PARTIAL_SYNC_FAILURE
    assert set(result.failed_keys) == {(1, LESSON), (2, LESSON)}
    assert "sheets unavailable" in result.sync_error
    assert len(attendance.rows) == 2
    assert not any(r.synced_to_sheets for r in attendance.rows.values())
    assert attendance.sync_errors[(1, LESSON)] == "sheets unavailable"


def test_rejected_rows_only_leave_their_records_unsynced():
    svc, attendance, _, sheets = _service()
    sheets.reject = {2}

    result = _submit(svc, AttendanceEntry(1, "P"), AttendanceEntry(2, "P"))

    assert result.sync_status == SyncStatus.PARTIAL_SYNC_FAILURE
    assert result.failed_keys == ((2, LESSON),)
    assert attendance.rows[(1, LESSON)].synced_to_sheets is True
    assert attendance.rows[(2, LESSON)].synced_to_sheets is False


def test_mark_synced_failure_is_logged_and_not_raised(caplog):
    svc, attendance, _, _ = _service()
    attendance.fail_mark_synced = RuntimeError("deadlock")

    with caplog.at_level(logging.ERROR):
        result = _submit(svc, AttendanceEntry(1, "P"))

    assert result.sync_status == SyncStatus.SYNCED
    assert result.saved[0].synced_to_sheets is False
    assert "Marking 1 records as synced failed" in caplog.text


def test_retry_pushes_unsynced_records_once_the_sheet_is_back():
    svc, attendance, _, sheets = _service()
    sheets.fail_with = SheetSyncError("down")
    _submit(svc, AttendanceEntry(1, "P"))

    sheets.fail_with = None
    result = svc.retry_unsynced_attendance(current_role=Role.TEACHER, actor_id=7)

    assert result.sync_status == SyncStatus.SYNCED
    assert attendance.rows[(1, LESSON)].synced_to_sheets is True
    assert sheets.calls == 2


def test_retry_with_nothing_pending_does_not_call_the_sheet():
    svc, _, _, sheets = _service()
    result = svc.retry_unsynced_attendance(current_role=Role.TEACHER, actor_id=7)
    assert result.fully_synced
    assert result.saved == ()
    assert sheets.calls == 0


def test_syncing_given_records_ignores_a_long_backlog():
    svc, attendance, _, sheets = _service()
    sheets.fail_with = SheetSyncError("down")
    for week in range(60):
        svc.submit_attendance(
            current_role=Role.TEACHER,
            actor_id=7,
            class_id=3,
            attendance_date=LESSON - timedelta(weeks=week + 1),
            entries=[AttendanceEntry(1, "P")],
        )
    sheets.fail_with = None
    approved = attendance.upsert_many([_excused(2)])

    result = svc.sync_attendance_records(approved)

    assert result.fully_synced
    assert [row.record_key for row in sheets.batches[-1]] == [(2, LESSON)]
    assert attendance.rows[(2, LESSON)].synced_to_sheets is True


def test_syncing_given_records_never_raises(caplog):
    svc, attendance, _, sheets = _service()
    attendance.fail_list_unsynced = RuntimeError("db gone")
    sheets.fail_with = RuntimeError("boom")
    approved = attendance.upsert_many([_excused(2)])

    with caplog.at_level(logging.WARNING):
        result = svc.sync_attendance_records(approved)

    assert result.sync_status == SyncStatus.PARTIAL_SYNC_FAILURE
    assert result.failed_keys == ((2, LESSON),)
    assert attendance.rows[(2, LESSON)].synced_to_sheets is False
    assert "boom" in caplog.text


def test_evaluation_submission_writes_one_cell_per_category():
    svc, _, evaluations, sheets = _service()

    result = _evaluate(
        svc,
        4,
        EvaluationEntry(1, {"D": "A", "HW": "B", "AP": ""}),
        EvaluationEntry(2, {}),
    )

    assert result.fully_synced
    assert len(result.saved) == 1
    record = evaluations.rows[(1, 4)]
    assert record.ratings == {EvaluationCategory.DISCIPLINE: "A", EvaluationCategory.HOMEWORK: "B"}
    assert [(row.category, row.value) for row in sheets.batches[0]] == [
        (EvaluationCategory.DISCIPLINE, "A"),
        (EvaluationCategory.HOMEWORK, "B"),
    ]


def test_evaluation_requires_positive_chapter_and_known_categories():
    svc, _, _, _ = _service()
    with pytest.raises(ValidationError):
        _evaluate(svc, 0, EvaluationEntry(1, {"D": "A"}))
    with pytest.raises(ValidationError):
        _evaluate(svc, 2, EvaluationEntry(1, {"Q": "A"}))


def test_evaluation_without_ratings_is_rejected():
    svc, _, _, _ = _service()
    with pytest.raises(EmptySubmission):
        _evaluate(svc, 2, EvaluationEntry(1, {"D": " "}))


def test_evaluation_resubmission_replaces_ratings():
    svc, _, evaluations, _ = _service()
    _evaluate(svc, 2, EvaluationEntry(1, {"D": "A", "B": "A"}))
    _evaluate(svc, 2, EvaluationEntry(1, {"D": "C"}))

    assert len(evaluations.rows) == 1
    assert evaluations.rows[(1, 2)].ratings == {EvaluationCategory.DISCIPLINE: "C"}
