from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Teacher
from .repository import TeacherRepository

_SELECT = """
    SELECT t.teacher_id, t.full_name, t.email,
           c.class_id, c.year_level, c.name AS class_name
    FROM teachers t
    LEFT JOIN classes c ON c.class_id = t.default_class_id
"""


def _to_teacher(r: Dict[str, Any]) -> Teacher:
    return Teacher(
        teacher_id=int(r["teacher_id"]),
        full_name=r["full_name"],
        email=r["email"],
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        year_level=int(r["year_level"]) if r.get("year_level") is not None else None,
        class_name=r.get("class_name"),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def list_active_with_class(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE t.is_active=1 AND t.default_class_id IS NOT NULL
                ORDER BY t.full_name ASC
                """
            )
            return [_to_teacher(r) for r in fetchall(cur)]
