from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json_column(value: Any) -> Dict[str, Any]:
    """Normalize MySQL JSON values across connector implementations.

    mysql-connector can return JSON columns as str, bytes or (already decoded) dict.
    """

    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return dict(json.loads(value or "{}"))
    raise TypeError(f"Unsupported MySQL JSON value type: {type(value)!r}")


def pair_in_clause(count: int) -> str:
    """Placeholder list for `(a, b) IN (...)` composite-key lookups."""
    return ", ".join(["(%s, %s)"] * count)


def flatten_pairs(pairs: Sequence[tuple]) -> tuple:
    return tuple(v for pair in pairs for v in pair)
