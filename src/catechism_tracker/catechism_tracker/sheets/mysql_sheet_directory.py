from __future__ import annotations

from typing import Optional

from ..core.enums import RecordStream
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .adapter import SheetDirectory
from .model import StudentLocation


class MySQLSheetDirectory(SheetDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def spreadsheet_id_for(self, *, teacher_id: int, stream: RecordStream) -> Optional[str]:
        column = "attendance_sheet_id" if stream == RecordStream.ATTENDANCE else "evaluation_sheet_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {column} AS sheet_id FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return (r.get("sheet_id") or None) if r else None

    def student_location(self, *, student_id: int, stream: RecordStream) -> Optional[StudentLocation]:
        if stream == RecordStream.ATTENDANCE:
            select = "s.sheet_row AS sheet_row, c.sheet_name AS sheet_name"
        else:
            select = "s.eval_sheet_row AS sheet_row, c.evaluation_sheet_name AS sheet_name"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {select}
                FROM students s
                JOIN classes c ON c.class_id = s.class_id
                WHERE s.student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r or not r.get("sheet_name") or not r.get("sheet_row"):
                return None
            return StudentLocation(sheet_name=r["sheet_name"], row_number=int(r["sheet_row"]))
