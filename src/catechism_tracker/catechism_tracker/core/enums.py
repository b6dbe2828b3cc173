from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"


class AttendanceStatus(str, Enum):
    """Attendance codes, stored and written to the sheet verbatim."""

    PRESENT = "P"
    LATE = "L"
    UNATTENDED_MASS = "UM"
    EXCUSED = "E"
    UNEXCUSED = "U"


class EvaluationCategory(str, Enum):
    DISCIPLINE = "D"
    BEHAVIOUR = "B"
    HOMEWORK = "HW"
    ACTIVE_PARTICIPATION = "AP"


class CohortTag(str, Enum):
    """Which catechism group a logged lesson was held for."""

    JUNIOR = "Junior"
    SENIOR = "Senior"
    BOTH = "Both"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SyncStatus(str, Enum):
    """Outcome of pushing saved records to the spreadsheet mirror."""

    SYNCED = "synced"
    PARTIAL_SYNC_FAILURE = "partial_sync_failure"


class RecordStream(str, Enum):
    """The two parallel record-keeping streams."""

    ATTENDANCE = "attendance"
    EVALUATION = "evaluation"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        return 0 if self is Severity.HIGH else 1
