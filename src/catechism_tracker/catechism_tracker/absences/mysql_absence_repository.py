from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AbsenceRequest
from .repository import AbsenceRequestRepository

_COLUMNS = """
    request_id, student_id, class_id, absence_date, reason, status,
    submitted_by, created_at, reviewed_by, reviewed_at, review_notes,
    attendance_record_id
"""


def _to_request(r: Dict[str, Any]) -> AbsenceRequest:
    return AbsenceRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        absence_date=r["absence_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        submitted_by=int(r["submitted_by"]),
        created_at=r["created_at"],
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_notes=r.get("review_notes"),
        attendance_record_id=r.get("attendance_record_id"),
    )


class MySQLAbsenceRequestRepository(AbsenceRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        student_id: int,
        class_id: Optional[int],
        absence_date: date,
        reason: str,
        submitted_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO absence_requests(student_id, class_id, absence_date, reason, status, submitted_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    class_id,
                    absence_date,
                    reason,
                    RequestStatus.PENDING.value,
                    int(submitted_by),
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[AbsenceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM absence_requests WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        student_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[AbsenceRequest]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM absence_requests
                {where}
                ORDER BY absence_date DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE absence_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s,
                    attendance_record_id=COALESCE(%s, attendance_record_id)
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    reviewed_at,
                    review_notes,
                    attendance_record_id,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
