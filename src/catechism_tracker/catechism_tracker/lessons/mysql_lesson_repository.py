from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import CohortTag
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import LessonOccurrence
from .repository import LessonRepository


class MySQLLessonRepository(LessonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_in_window(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LessonOccurrence]:
        clauses: list[str] = []
        params: list[object] = []
        if start_date is not None:
            clauses.append("lesson_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("lesson_date <= %s")
            params.append(end_date)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT lesson_date, group_type, notes
                FROM catechism_lesson_logs
                {where}
                ORDER BY lesson_date DESC
                """,
                tuple(params),
            )
            return [
                LessonOccurrence(
                    lesson_date=r["lesson_date"],
                    cohort=CohortTag(r["group_type"]),
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]
