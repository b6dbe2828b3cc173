"""In-memory stand-ins for the MySQL repositories and the sheet adapter."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from src.catechism_tracker.catechism_tracker.core.enums import RequestStatus
from src.catechism_tracker.catechism_tracker.absences.model import AbsenceRequest
from src.catechism_tracker.catechism_tracker.sheets.model import SheetWriteResult


def _matches(record, f):
    if f.teacher_id is not None and record.teacher_id != f.teacher_id:
        return False
    if f.class_id is not None and record.class_id != f.class_id:
        return False
    if f.student_id is not None and record.student_id != f.student_id:
        return False
    if f.synced is not None and record.synced_to_sheets != f.synced:
        return False
    day = getattr(record, "attendance_date", None)
    if day is not None:
        if f.start_date is not None and day < f.start_date:
            return False
        if f.end_date is not None and day > f.end_date:
            return False
    chapter = getattr(record, "chapter_number", None)
    if chapter is not None and f.chapter_number is not None and chapter != f.chapter_number:
        return False
    return True


class InMemoryRecordRepo:
    """Keyed by the record's natural key, like the UNIQUE index in MySQL."""

    def __init__(self):
        self.rows = {}
        self._next_id = 1
        self.upsert_calls = 0
        self.fail_upsert = None
        self.fail_mark_synced = None
        self.fail_list_unsynced = None
        self.sync_errors = {}
        self.last_filter = None

    def upsert_many(self, records):
        self.upsert_calls += 1
        if self.fail_upsert:
            raise self.fail_upsert
        out = []
        for r in records:
            existing = self.rows.get(r.key)
            record_id = existing.record_id if existing else self._next_id
            if not existing:
                self._next_id += 1
            saved = replace(r, record_id=record_id, synced_to_sheets=False, sync_error=None)
            self.rows[r.key] = saved
            out.append(saved)
        return out

    def mark_synced(self, keys):
        if self.fail_mark_synced:
            raise self.fail_mark_synced
        for k in keys:
            self.rows[k] = self.rows[k].marked_synced()

    def mark_sync_failed(self, keys, error):
        for k in keys:
            self.rows[k] = replace(self.rows[k], synced_to_sheets=False, sync_error=error)
            self.sync_errors[k] = error

    def list_unsynced(self, *, teacher_id, limit=50):
        if self.fail_list_unsynced:
            raise self.fail_list_unsynced
        pending = [r for r in self.rows.values() if r.teacher_id == teacher_id and not r.synced_to_sheets]
        return pending[:limit]

    def list_by_filter(self, record_filter):
        self.last_filter = record_filter
        rows = [r for r in self.rows.values() if _matches(r, record_filter)]
        return rows[: record_filter.limit] if record_filter.limit else rows


class InMemoryAttendanceRepo(InMemoryRecordRepo):
    def find_one(self, *, student_id, attendance_date):
        return self.rows.get((student_id, attendance_date))

    def list_dates_for_teacher(self, *, teacher_id, start_date, end_date):
        return {
            r.attendance_date
            for r in self.rows.values()
            if r.teacher_id == teacher_id and start_date <= r.attendance_date <= end_date
        }


class InMemoryEvaluationRepo(InMemoryRecordRepo):
    def list_chapters_for_teacher(self, *, teacher_id):
        return {r.chapter_number for r in self.rows.values() if r.teacher_id == teacher_id}

    def list_distinct_chapters(self):
        return sorted({r.chapter_number for r in self.rows.values()})


class FakeSheets:
    """Records every batch; `fail_with` raises, `reject` fails rows for the given student ids."""

    def __init__(self):
        self.batches = []
        self.fail_with = None
        self.reject = set()

    @property
    def calls(self):
        return len(self.batches)

    def write_batch(self, rows):
        self.batches.append(list(rows))
        if self.fail_with:
            raise self.fail_with
        failed = tuple(r for r in rows if r.student_id in self.reject)
        if failed:
            return SheetWriteResult(ok=False, failed_rows=failed, error="quota exceeded")
        return SheetWriteResult.success()


class FakeTeachers:
    def __init__(self, teachers):
        self._teachers = list(teachers)

    def get_by_id(self, teacher_id):
        return next((t for t in self._teachers if t.teacher_id == teacher_id), None)

    def list_active_with_class(self):
        return [t for t in self._teachers if t.class_id is not None]


class FakeLessons:
    def __init__(self, lessons):
        self._lessons = list(lessons)
        self.last_window = None

    def list_in_window(self, *, start_date=None, end_date=None):
        self.last_window = (start_date, end_date)
        return [
            lesson
            for lesson in self._lessons
            if (start_date is None or lesson.lesson_date >= start_date)
            and (end_date is None or lesson.lesson_date <= end_date)
        ]


class FakeAbsenceRequests:
    def __init__(self):
        self._next_id = 1
        self.requests = {}
        self.decide_calls = 0

    def create(self, *, student_id, class_id, absence_date, reason, submitted_by):
        rid = self._next_id
        self._next_id += 1
        self.requests[rid] = AbsenceRequest(
            request_id=rid,
            student_id=int(student_id),
            class_id=class_id,
            absence_date=absence_date,
            reason=reason,
            status=RequestStatus.PENDING,
            submitted_by=int(submitted_by),
            created_at=datetime(2025, 10, 1, 9, 0, 0),
        )
        return rid

    def get(self, *, request_id):
        return self.requests.get(int(request_id))

    def list_requests(self, *, status=None, student_id=None, limit=200):
        out = [
            r
            for r in self.requests.values()
            if (status is None or r.status == status) and (student_id is None or r.student_id == student_id)
        ]
        return out[:limit]

    def decide(self, *, request_id, status, reviewed_by, reviewed_at, review_notes=None, attendance_record_id=None):
        self.decide_calls += 1
        req = self.requests.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.requests[int(request_id)] = replace(
            req,
            status=status,
            reviewed_by=int(reviewed_by),
            reviewed_at=reviewed_at,
            review_notes=review_notes,
            attendance_record_id=attendance_record_id,
        )
        return True
