# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid
from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import Entitlement, LeaveTypeName

WorkingDaysPerWeek = Literal[4, 5, 6]


class HolidayEntry(BaseModel):
    """A single holiday: calendar date plus label."""

    date: datetime.date
    name: str = Field(default="Holiday", min_length=1, max_length=255)


def _ensure_unique_dates(holidays: list[HolidayEntry] | None) -> None:
    if not holidays:
        return
    seen: set[datetime.date] = set()
    for holiday in holidays:
        if holiday.date in seen:
            msg = f"Duplicate holiday date {holiday.date.isoformat()}"
            raise ValueError(msg)
        seen.add(holiday.date)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateConfigRequest(BaseModel):
    """Request body for creating the configuration of a year."""

    year: int = Field(ge=2000, le=2100)
    working_days_per_week: WorkingDaysPerWeek
    holidays: list[HolidayEntry] = []
    leave_types: dict[LeaveTypeName, Entitlement]

    @model_validator(mode="after")
    def _validate_holidays(self) -> Self:
        _ensure_unique_dates(self.holidays)
        return self


class UpsertConfigRequest(BaseModel):
    """Partial update; omitted fields are left untouched."""

    working_days_per_week: WorkingDaysPerWeek | None = None
    holidays: list[HolidayEntry] | None = None
    leave_types: dict[LeaveTypeName, Entitlement] | None = None

    @model_validator(mode="after")
    def _validate_holidays(self) -> Self:
        _ensure_unique_dates(self.holidays)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ConfigResponse(BaseModel):
    """Response schema for a yearly configuration."""

    id: uuid.UUID
    year: int
    working_days_per_week: int
    holidays: list[HolidayEntry]
    leave_types: dict[str, int]
    is_locked: bool
    created_by: uuid.UUID
    updated_by: uuid.UUID | None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class WorkingDaysResponse(BaseModel):
    """Working-day count for a date range under a year's calendar."""

    year: int
    from_date: datetime.date
    to_date: datetime.date
    working_days: int
