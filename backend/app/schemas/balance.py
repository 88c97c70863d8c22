# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Derived balance for one user, leave type and year."""

    user_id: uuid.UUID
    leave_type: str
    year: int
    entitlement: int
    consumed: int
    remaining: int


class BalanceListResponse(BaseModel):
    """All configured leave types for a user in a year."""

    user_id: uuid.UUID
    year: int
    items: list[BalanceResponse]
    total: int
