from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import error_response, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .eligibility import group_label
from .model import Alert, CompletionSummary, ReconciliationReport, TeacherCompletion


def _unit(value: Any) -> Any:
    return value.strftime("%Y-%m-%d") if isinstance(value, date) else value


def summary_to_json(s: CompletionSummary) -> Dict[str, Any]:
    return {
        "by_unit": {str(_unit(k)): v for k, v in s.by_unit.items()},
        "total_expected": s.total_expected,
        "total_completed": s.total_completed,
        "completion_rate": s.completion_rate,
    }


def completion_to_json(c: TeacherCompletion) -> Dict[str, Any]:
    return {
        "teacher_id": c.teacher.teacher_id,
        "full_name": c.teacher.full_name,
        "class_name": c.teacher.class_name,
        "group": group_label(c.teacher.year_level),
        "attendance": summary_to_json(c.attendance),
        "evaluation": summary_to_json(c.evaluation),
    }


def alert_to_json(a: Alert) -> Dict[str, Any]:
    return {
        "kind": a.kind.value,
        "severity": a.severity.value,
        "teacher_id": a.teacher.teacher_id,
        "teacher_name": a.teacher.full_name,
        "message": a.message,
        "missing_units": [_unit(u) for u in a.missing_units],
    }


def report_to_json(report: ReconciliationReport) -> Dict[str, Any]:
    return {
        "window": {
            "start_date": report.window.start_date.strftime("%Y-%m-%d"),
            "end_date": report.window.end_date.strftime("%Y-%m-%d"),
        }
        if report.window
        else None,
        "chapters": list(report.chapters),
        "teachers": [completion_to_json(c) for c in report.completion.values()],
        "stats": asdict(report.stats),
        "alerts": [alert_to_json(a) for a in report.alerts],
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/overview", methods=["GET"], endpoint="overview")
    @role_required(Role.ADMIN)
    def overview():
        today = None
        raw = request.args.get("today")
        if raw:
            try:
                today = parse_iso_date(raw)
            except ValueError:
                return error_response(ValidationError("today must be a YYYY-MM-DD date"))

        report = container.reconciliation_service.build_report(today)
        return jsonify(report_to_json(report))
