# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class YearConfig(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """Working-day rule and leave entitlements for one calendar year."""

    __tablename__ = "year_config"
    __table_args__ = (
        sa.UniqueConstraint("year", name="uq_year_config_year"),
        sa.CheckConstraint("working_days_per_week IN (4, 5, 6)", name="ck_year_config_working_days"),
    )

    year: int = Field(index=True)
    working_days_per_week: int
    leave_types_json: dict[str, int] = Field(default_factory=dict, sa_type=sa.JSON)
    is_locked: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    created_by: uuid.UUID
    updated_by: uuid.UUID | None = None


class ConfigHoliday(UUIDBase, table=True):
    """A holiday belonging to a yearly configuration; excluded from working-day counts."""

    __tablename__ = "config_holiday"
    __table_args__ = (sa.UniqueConstraint("config_id", "date", name="uq_config_holiday_date"),)

    config_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("year_config.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    date: datetime.date
    name: str = Field(max_length=255)
