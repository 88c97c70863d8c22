# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from app.models.enums import LeaveStatus
from app.schemas.common import LeaveTypeName

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ApplyLeaveRequest(BaseModel):
    """Request body for applying for leave. Both dates are inclusive."""

    from_date: date
    to_date: date
    leave_type: LeaveTypeName
    reason: str = Field(min_length=1, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.to_date < self.from_date:
            msg = "to_date cannot be before from_date"
            raise ValueError(msg)
        return self


class DecisionPayload(BaseModel):
    """Request body for approve/reject actions."""

    comment: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    requested_by: uuid.UUID
    approver_id: uuid.UUID | None
    from_date: date
    to_date: date
    leave_type: str
    reason: str
    status: LeaveStatus
    working_days: int
    approver_comment: str | None
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    created_at: datetime


class LeaveListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveResponse]
    total: int
