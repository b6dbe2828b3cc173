from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request

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
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..submissions.controller import attendance_to_json
from .model import AbsenceRequest


def request_to_json(r: AbsenceRequest) -> Dict[str, Any]:
    return {
        "request_id": r.request_id,
        "student_id": r.student_id,
        "class_id": r.class_id,
        "absence_date": r.absence_date.strftime("%Y-%m-%d"),
        "reason": r.reason,
        "status": r.status.value,
        "reviewed_by": r.reviewed_by,
        "reviewed_at": r.reviewed_at.isoformat() if r.reviewed_at else None,
        "review_notes": r.review_notes,
        "attendance_record_id": r.attendance_record_id,
    }


def register(app: Flask, container: Container) -> None:
    service = container.absence_service

    @app.route("/api/absences", methods=["POST"], endpoint="create_absence")
    @login_required
    def create_absence():
        try:
            payload = require_json()
            request_id = service.create_request(
                current_role=current_role(),
                actor_id=current_actor(),
                student_id=json_int(payload, "student_id"),
                class_id=json_int(payload, "class_id", required=False),
                absence_date=json_date(payload, "absence_date"),
                reason=str(payload.get("reason") or ""),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"request_id": request_id}), 201

    @app.route("/api/absences/pending", methods=["GET"], endpoint="pending_absences")
    @role_required(Role.ADMIN)
    def pending_absences():
        return jsonify([request_to_json(r) for r in service.list_pending()])

    @app.route("/api/absences/<int:request_id>/approve", methods=["POST"], endpoint="approve_absence")
    @role_required(Role.ADMIN)
    def approve_absence(request_id: int):
        try:
            payload = require_json()
            record = service.approve_absence(
                current_role=current_role(),
                reviewer_id=current_actor(),
                request_id=request_id,
                reviewer_notes=str(payload.get("notes") or ""),
            )
        except DomainError as e:
            return error_response(e)

        # The approval is committed; a failed push leaves the mark for the next retry.
        sync = container.submission_service.sync_attendance_records([record])
        return jsonify({"attendance": attendance_to_json(record), "sync_status": sync.sync_status.value})

    @app.route("/api/absences/<int:request_id>/reject", methods=["POST"], endpoint="reject_absence")
    @role_required(Role.ADMIN)
    def reject_absence(request_id: int):
        try:
            payload = require_json()
            service.reject_absence(
                current_role=current_role(),
                reviewer_id=current_actor(),
                request_id=request_id,
                notes=str(payload.get("notes") or ""),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"status": "rejected"})

    @app.route("/api/absences", methods=["GET"], endpoint="student_absences")
    @role_required(Role.PARENT, Role.ADMIN)
    def student_absences():
        try:
            student_id = json_int(dict(request.args.items()), "student_id")
        except DomainError as e:
            return error_response(e)
        return jsonify([request_to_json(r) for r in service.list_for_student(student_id=student_id)])
