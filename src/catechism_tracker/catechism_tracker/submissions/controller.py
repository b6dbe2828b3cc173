from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request

from ..attendance.model import AttendanceEntry, AttendanceRecord
from ..common.datetime_utils import nearest_sunday, now_local
from ..common.filters import RecordFilter
from ..common.web import (
    current_actor,
    current_role,
    error_response,
    json_date,
    json_int,
    login_required,
    require_json,
    role_required,
)
from ..container import Container
from ..core.enums import RecordStream, Role
from ..core.exceptions import DomainError, ValidationError
from ..evaluations.model import EvaluationEntry, EvaluationRecord
from .service import SubmissionResult


def attendance_to_json(r: AttendanceRecord) -> Dict[str, Any]:
    return {
        "record_id": r.record_id,
        "student_id": r.student_id,
        "attendance_date": r.attendance_date.strftime("%Y-%m-%d"),
        "status": r.status.value,
        "column_identifier": r.column_identifier,
        "synced_to_sheets": r.synced_to_sheets,
    }


def evaluation_to_json(r: EvaluationRecord) -> Dict[str, Any]:
    return {
        "record_id": r.record_id,
        "student_id": r.student_id,
        "chapter_number": r.chapter_number,
        "ratings": r.ratings_json(),
        "synced_to_sheets": r.synced_to_sheets,
    }


def result_to_json(result: SubmissionResult) -> Dict[str, Any]:
    saved = []
    for r in result.saved:
        saved.append(attendance_to_json(r) if isinstance(r, AttendanceRecord) else evaluation_to_json(r))
    return {
        "saved": saved,
        "sync_status": result.sync_status.value,
        "failed_count": len(result.failed_keys),
        "sync_error": result.sync_error,
    }


def register(app: Flask, container: Container) -> None:
    service = container.submission_service

    def class_for(payload: Dict[str, Any]):
        # Teachers normally submit for their default class.
        class_id = json_int(payload, "class_id", required=False)
        if class_id is None:
            teacher = container.teachers_repo.get_by_id(current_actor())
            class_id = teacher.class_id if teacher else None
        return class_id

    @app.route("/api/attendance", methods=["POST"], endpoint="submit_attendance")
    @role_required(Role.TEACHER, Role.ADMIN)
    def submit_attendance():
        try:
            payload = require_json()
            entries = [
                AttendanceEntry(student_id=int(e["student_id"]), status=e.get("status"))
                for e in payload.get("entries") or []
            ]
            # No date means the lesson of the current week.
            if payload.get("date"):
                attendance_date = json_date(payload, "date")
            else:
                attendance_date = nearest_sunday(now_local().date())
            result = service.submit_attendance(
                current_role=current_role(),
                actor_id=current_actor(),
                class_id=class_for(payload),
                attendance_date=attendance_date,
                entries=entries,
            )
        except (KeyError, TypeError, ValueError):
            return error_response(ValidationError("Each entry needs a numeric student_id"))
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_json(result))

    @app.route("/api/evaluations", methods=["POST"], endpoint="submit_evaluation")
    @role_required(Role.TEACHER, Role.ADMIN)
    def submit_evaluation():
        try:
            payload = require_json()
            entries = [
                EvaluationEntry(student_id=int(e["student_id"]), ratings=dict(e.get("ratings") or {}))
                for e in payload.get("entries") or []
            ]
            result = service.submit_evaluation(
                current_role=current_role(),
                actor_id=current_actor(),
                class_id=class_for(payload),
                chapter_number=json_int(payload, "chapter"),
                entries=entries,
            )
        except (KeyError, TypeError, ValueError):
            return error_response(ValidationError("Each entry needs a numeric student_id and a ratings object"))
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_json(result))

    @app.route("/api/sync/retry", methods=["POST"], endpoint="retry_sync")
    @role_required(Role.TEACHER, Role.ADMIN)
    def retry_sync():
        try:
            payload = require_json()
            stream = RecordStream(payload.get("stream") or RecordStream.ATTENDANCE.value)
            if stream == RecordStream.ATTENDANCE:
                result = service.retry_unsynced_attendance(current_role=current_role(), actor_id=current_actor())
            else:
                result = service.retry_unsynced_evaluations(current_role=current_role(), actor_id=current_actor())
        except ValueError:
            return error_response(ValidationError("stream must be 'attendance' or 'evaluation'"))
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_json(result))

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        try:
            records = service.list_attendance(
                current_role=current_role(),
                actor_id=current_actor(),
                record_filter=_filter_from_args(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify([attendance_to_json(r) for r in records])

    @app.route("/api/evaluations", methods=["GET"], endpoint="list_evaluations")
    @login_required
    def list_evaluations():
        try:
            records = service.list_evaluations(
                current_role=current_role(),
                actor_id=current_actor(),
                record_filter=_filter_from_args(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify([evaluation_to_json(r) for r in records])


def _filter_from_args() -> RecordFilter:
    args = dict(request.args.items())
    synced = args.get("synced")
    return RecordFilter(
        class_id=json_int(args, "class_id", required=False),
        student_id=json_int(args, "student_id", required=False),
        start_date=json_date(args, "start_date") if args.get("start_date") else None,
        end_date=json_date(args, "end_date") if args.get("end_date") else None,
        chapter_number=json_int(args, "chapter", required=False),
        synced=None if synced is None else synced.lower() in {"1", "true", "yes"},
        limit=json_int(args, "limit", required=False) or 500,
    )
