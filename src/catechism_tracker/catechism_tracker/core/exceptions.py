from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class EmptySubmission(ValidationError):
    """Raised when a submission carries no usable status or rating."""


class NotFoundError(ValidationError):
    """Raised when a referenced entity does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PersistenceFailure(DomainError):
    """Raised when the record store rejected a write.

    Nothing from the failed call is considered saved.
    """

    def __init__(self, unit_key: Any, message: str):
        super().__init__(f"{message} (unit={unit_key})")
        self.unit_key = unit_key


class SheetSyncError(DomainError):
    """Raised by sheet adapters for failures that affect the whole batch."""
