from __future__ import annotations

from typing import Optional

from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_actor(actor_id: Optional[int]) -> int:
    """Every mutating operation needs an authenticated actor."""
    if actor_id is None or int(actor_id) <= 0:
        raise AuthorizationError("An authenticated user is required")
    return int(actor_id)
