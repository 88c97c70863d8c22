# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UUIDBase
from app.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A leave application and its approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_requester_status", "requested_by", "status"),
        sa.CheckConstraint("to_date >= from_date", name="ck_leave_request_date_order"),
    )

    requested_by: uuid.UUID = Field(index=True)
    approver_id: uuid.UUID | None = Field(default=None, index=True)
    from_date: date
    to_date: date
    leave_type: str = Field(max_length=50)
    reason: str = Field(max_length=1000)
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    working_days: int
    approver_comment: str | None = Field(default=None, max_length=500)
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None
