from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence, Set

from ..common.filters import RecordFilter
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, flatten_pairs, pair_in_clause
from .model import AttendanceKey, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, student_id, attendance_date, teacher_id, class_id,
    status, column_identifier, synced_to_sheets, sync_error
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        teacher_id=int(r["teacher_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        status=AttendanceStatus(r["status"]),
        column_identifier=r["column_identifier"],
        synced_to_sheets=bool(r["synced_to_sheets"]),
        sync_error=r.get("sync_error"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_many(self, records: Sequence[AttendanceRecord]) -> Sequence[AttendanceRecord]:
        if not records:
            return []

        keys = [r.key for r in records]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(
                    student_id, attendance_date, teacher_id, class_id,
                    status, column_identifier, synced_to_sheets, sync_error
                )
                VALUES(%s,%s,%s,%s,%s,%s,0,NULL)
                ON DUPLICATE KEY UPDATE
                    teacher_id=VALUES(teacher_id),
                    class_id=VALUES(class_id),
                    status=VALUES(status),
                    column_identifier=VALUES(column_identifier),
                    synced_to_sheets=0,
                    sync_error=NULL
                """,
                [
                    (
                        r.student_id,
                        r.attendance_date,
                        r.teacher_id,
                        r.class_id,
                        r.status.value,
                        r.column_identifier,
                    )
                    for r in records
                ],
            )

            # Read back inside the same transaction so ids are known for updates.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE (student_id, attendance_date) IN ({pair_in_clause(len(keys))})
                """,
                flatten_pairs(keys),
            )
            by_key = {(int(r["student_id"]), r["attendance_date"]): _to_record(r) for r in fetchall(cur)}
            return [by_key[k] for k in keys if k in by_key]

    def find_one(self, *, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_filter(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if record_filter.teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(record_filter.teacher_id))
        if record_filter.class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(record_filter.class_id))
        if record_filter.student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(record_filter.student_id))
        if record_filter.start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(record_filter.start_date)
        if record_filter.end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(record_filter.end_date)
        if record_filter.synced is not None:
            clauses.append("synced_to_sheets=%s")
            params.append(1 if record_filter.synced else 0)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        limit = ""
        if record_filter.limit is not None:
            limit = "LIMIT %s"
            params.append(int(record_filter.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY attendance_date ASC, record_id ASC
                {limit}
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_dates_for_teacher(self, *, teacher_id: int, start_date: date, end_date: date) -> Set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT attendance_date
                FROM attendance_records
                WHERE teacher_id=%s AND attendance_date BETWEEN %s AND %s
                """,
                (int(teacher_id), start_date, end_date),
            )
            return {r["attendance_date"] for r in fetchall(cur)}

    def mark_synced(self, keys: Sequence[AttendanceKey]) -> int:
        if not keys:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET synced_to_sheets=1, sync_error=NULL
                WHERE (student_id, attendance_date) IN ({pair_in_clause(len(keys))})
                """,
                flatten_pairs(keys),
            )
            return cur.rowcount

    def mark_sync_failed(self, keys: Sequence[AttendanceKey], error: str) -> int:
        if not keys:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET synced_to_sheets=0, sync_error=%s
                WHERE (student_id, attendance_date) IN ({pair_in_clause(len(keys))})
                """,
                (error[:500],) + flatten_pairs(keys),
            )
            return cur.rowcount

    def list_unsynced(self, *, teacher_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE teacher_id=%s AND synced_to_sheets=0
                ORDER BY created_at ASC, record_id ASC
                LIMIT %s
                """,
                (int(teacher_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
