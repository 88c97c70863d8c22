# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from app.models.base import now_utc


class LeaveApplyGuard(SQLModel, table=True):
    """Per-user, per-year row locked while a leave application is checked and inserted."""

    __tablename__ = "leave_apply_guard"
    __table_args__ = (sa.PrimaryKeyConstraint("user_id", "year"),)

    user_id: uuid.UUID
    year: int
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )
