from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence, Set

from ..common.filters import RecordFilter
from ..core.enums import EvaluationCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    flatten_pairs,
    load_json_column,
    pair_in_clause,
)
from .model import EvaluationKey, EvaluationRecord
from .repository import EvaluationRepository

_COLUMNS = """
    record_id, student_id, chapter_number, teacher_id, class_id,
    ratings, synced_to_sheets, sync_error
"""


def _to_record(r: Dict[str, Any]) -> EvaluationRecord:
    ratings = load_json_column(r.get("ratings"))
    return EvaluationRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        chapter_number=int(r["chapter_number"]),
        teacher_id=int(r["teacher_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        ratings={EvaluationCategory(k): str(v) for k, v in ratings.items()},
        synced_to_sheets=bool(r["synced_to_sheets"]),
        sync_error=r.get("sync_error"),
    )


class MySQLEvaluationRepository(EvaluationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_many(self, records: Sequence[EvaluationRecord]) -> Sequence[EvaluationRecord]:
        if not records:
            return []

        keys = [r.key for r in records]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO lesson_evaluations(
                    student_id, chapter_number, teacher_id, class_id,
                    ratings, synced_to_sheets, sync_error
                )
                VALUES(%s,%s,%s,%s,%s,0,NULL)
                ON DUPLICATE KEY UPDATE
                    teacher_id=VALUES(teacher_id),
                    class_id=VALUES(class_id),
                    ratings=VALUES(ratings),
                    synced_to_sheets=0,
                    sync_error=NULL
                """,
                [
                    (
                        r.student_id,
                        r.chapter_number,
                        r.teacher_id,
                        r.class_id,
                        json.dumps(r.ratings_json()),
                    )
                    for r in records
                ],
            )

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM lesson_evaluations
                WHERE (student_id, chapter_number) IN ({pair_in_clause(len(keys))})
                """,
                flatten_pairs(keys),
            )
            by_key = {(int(r["student_id"]), int(r["chapter_number"])): _to_record(r) for r in fetchall(cur)}
            return [by_key[k] for k in keys if k in by_key]

    def find_one(self, *, student_id: int, chapter_number: int) -> Optional[EvaluationRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM lesson_evaluations
                WHERE student_id=%s AND chapter_number=%s
                """,
                (int(student_id), int(chapter_number)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_filter(self, record_filter: RecordFilter) -> Sequence[EvaluationRecord]:
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
        if record_filter.chapter_number is not None:
            clauses.append("chapter_number=%s")
            params.append(int(record_filter.chapter_number))
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
                FROM lesson_evaluations
                {where}
                ORDER BY chapter_number ASC, record_id ASC
                {limit}
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_chapters_for_teacher(self, *, teacher_id: int) -> Set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT chapter_number FROM lesson_evaluations WHERE teacher_id=%s",
                (int(teacher_id),),
            )
            return {int(r["chapter_number"]) for r in fetchall(cur)}

    def list_distinct_chapters(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT chapter_number
                FROM lesson_evaluations
                WHERE chapter_number IS NOT NULL
                ORDER BY chapter_number ASC
                """
            )
            return [int(r["chapter_number"]) for r in fetchall(cur)]

    def mark_synced(self, keys: Sequence[EvaluationKey]) -> int:
        if not keys:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE lesson_evaluations
                SET synced_to_sheets=1, sync_error=NULL
                WHERE (student_id, chapter_number) IN ({pair_in_clause(len(keys))})
                """,
                flatten_pairs(keys),
            )
            return cur.rowcount

    def mark_sync_failed(self, keys: Sequence[EvaluationKey], error: str) -> int:
        if not keys:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE lesson_evaluations
                SET synced_to_sheets=0, sync_error=%s
                WHERE (student_id, chapter_number) IN ({pair_in_clause(len(keys))})
                """,
                (error[:500],) + flatten_pairs(keys),
            )
            return cur.rowcount

    def list_unsynced(self, *, teacher_id: int, limit: int) -> Sequence[EvaluationRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM lesson_evaluations
                WHERE teacher_id=%s AND synced_to_sheets=0
                ORDER BY created_at ASC, record_id ASC
                LIMIT %s
                """,
                (int(teacher_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
