from __future__ import annotations

from datetime import date

import pytest

from src.catechism_tracker.catechism_tracker.container import build_services
from src.catechism_tracker.catechism_tracker.core.enums import CohortTag
from src.catechism_tracker.catechism_tracker.lessons.model import LessonOccurrence
from src.catechism_tracker.catechism_tracker.main import create_app
from src.catechism_tracker.catechism_tracker.teachers.model import Teacher
from tests.fakes import (
    FakeAbsenceRequests,
    FakeLessons,
    FakeSheets,
    FakeTeachers,
    InMemoryAttendanceRepo,
    InMemoryEvaluationRepo,
)


@pytest.fixture
def container():
    return build_services(
        attendance_repo=InMemoryAttendanceRepo(),
        evaluations_repo=InMemoryEvaluationRepo(),
        teachers_repo=FakeTeachers([Teacher(7, "Anna", "anna@example.org", class_id=3, year_level=3, class_name="Y3A")]),
        lessons_repo=FakeLessons([LessonOccurrence(date(2025, 9, 28), CohortTag.BOTH)]),
        absences_repo=FakeAbsenceRequests(),
        sheets=FakeSheets(),
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_submission_requires_login(client):
    res = client.post("/api/attendance", json={"date": "2025-09-28", "entries": [{"student_id": 1, "status": "P"}]})
    assert res.status_code == 401


def test_attendance_submission_round_trip(client, container):
    _login(client, 7, "teacher")
    res = client.post(
        "/api/attendance",
        json={"class_id": 3, "date": "2025-09-28", "entries": [{"student_id": 1, "status": "P"}]},
    )

    assert res.status_code == 200
    body = res.get_json()
    assert body["sync_status"] == "synced"
    assert body["saved"][0]["column_identifier"] == "Sep/28"
    assert container.attendance_repo.rows[(1, date(2025, 9, 28))].synced_to_sheets is True


def test_empty_attendance_submission_is_bad_request(client):
    _login(client, 7, "teacher")
    res = client.post("/api/attendance", json={"date": "2025-09-28", "entries": [{"student_id": 1, "status": ""}]})
    assert res.status_code == 400
    assert res.get_json()["type"] == "EmptySubmission"


def test_sheet_failure_is_reported_not_raised(client, container):
    container.sheets.reject = {1}
    _login(client, 7, "teacher")
    res = client.post(
        "/api/evaluations",
        json={"class_id": 3, "chapter": 1, "entries": [{"student_id": 1, "ratings": {"D": "A"}}]},
    )
    assert res.status_code == 200
    assert res.get_json()["sync_status"] == "partial_sync_failure"
    assert res.get_json()["failed_count"] == 1


def test_overview_is_admin_only(client):
    _login(client, 7, "teacher")
    assert client.get("/api/overview").status_code == 403


def test_overview_reports_missing_attendance(client):
    _login(client, 1, "admin")
    res = client.get("/api/overview?today=2025-10-01")

    assert res.status_code == 200
    body = res.get_json()
    assert body["window"] == {"start_date": "2025-07-01", "end_date": "2025-10-01"}
    # Nothing evaluated yet, so no chapter is owed.
    assert body["chapters"] == []
    assert body["teachers"][0]["attendance"]["by_unit"] == {"2025-09-28": False}
    assert body["teachers"][0]["evaluation"]["total_expected"] == 0
    assert [a["kind"] for a in body["alerts"]] == ["attendance"]
    assert body["alerts"][0]["severity"] == "medium"
    assert body["alerts"][0]["message"] == "Missing 1 attendance record"
    assert body["alerts"][0]["missing_units"] == ["2025-09-28"]


def test_absence_flow_over_http(client, container):
    _login(client, 50, "parent")
    res = client.post(
        "/api/absences",
        json={"student_id": 1, "class_id": 3, "absence_date": "2025-09-28", "reason": "Sick"},
    )
    assert res.status_code == 201
    request_id = res.get_json()["request_id"]

    _login(client, 1, "admin")
    pending = client.get("/api/absences/pending").get_json()
    assert [r["request_id"] for r in pending] == [request_id]

    res = client.post(f"/api/absences/{request_id}/reject", json={"notes": ""})
    assert res.status_code == 400

    res = client.post(f"/api/absences/{request_id}/approve", json={"notes": "ok"})
    assert res.status_code == 200
    assert res.get_json()["attendance"]["status"] == "E"
    assert client.get("/api/absences/pending").get_json() == []


def test_unknown_absence_request_is_404(client):
    _login(client, 1, "admin")
    res = client.post("/api/absences/999/reject", json={"notes": "no"})
    assert res.status_code == 404


def test_class_defaults_to_the_teachers_own_class(client, container):
    _login(client, 7, "teacher")
    client.post("/api/attendance", json={"date": "2025-09-28", "entries": [{"student_id": 1, "status": "L"}]})
    assert container.attendance_repo.rows[(1, date(2025, 9, 28))].class_id == 3


def test_teacher_listing_is_scoped_to_own_records(client, container):
    _login(client, 7, "teacher")
    client.post("/api/attendance", json={"date": "2025-09-28", "entries": [{"student_id": 1, "status": "P"}]})

    res = client.get("/api/attendance?start_date=2025-09-01")

    assert res.status_code == 200
    listed = res.get_json()
    assert [r["student_id"] for r in listed] == [1]
    assert container.attendance_repo.last_filter.teacher_id == 7
    assert container.attendance_repo.last_filter.start_date == date(2025, 9, 1)


def test_parent_cannot_list_records(client):
    _login(client, 50, "parent")
    assert client.get("/api/evaluations").status_code == 403


def test_bad_filter_value_is_bad_request(client):
    _login(client, 1, "admin")
    assert client.get("/api/attendance?start_date=yesterday").status_code == 400


def test_parent_cannot_write_records(client, container):
    _login(client, 50, "parent")

    res = client.post(
        "/api/attendance",
        json={"class_id": 3, "date": "2025-09-28", "entries": [{"student_id": 5, "status": "U"}]},
    )
    assert res.status_code == 403
    res = client.post(
        "/api/evaluations",
        json={"class_id": 3, "chapter": 1, "entries": [{"student_id": 5, "ratings": {"D": "A"}}]},
    )
    assert res.status_code == 403
    assert client.post("/api/sync/retry", json={"stream": "attendance"}).status_code == 403

    assert container.attendance_repo.rows == {}
    assert container.evaluations_repo.rows == {}
    assert container.sheets.calls == 0


def test_approval_syncs_only_the_approved_record(client, container):
    _login(client, 50, "parent")
    res = client.post(
        "/api/absences",
        json={"student_id": 1, "class_id": 3, "absence_date": "2025-09-28", "reason": "Sick"},
    )
    request_id = res.get_json()["request_id"]
    container.attendance_repo.fail_list_unsynced = RuntimeError("db gone")

    _login(client, 1, "admin")
    res = client.post(f"/api/absences/{request_id}/approve", json={"notes": "ok"})

    assert res.status_code == 200
    assert res.get_json()["sync_status"] == "synced"
    assert [row.record_key for row in container.sheets.batches[-1]] == [(1, date(2025, 9, 28))]
    assert container.attendance_repo.rows[(1, date(2025, 9, 28))].synced_to_sheets is True
