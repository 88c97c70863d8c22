"""Reporting service: audit log queries and yearly leave summaries."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from app.models.audit import AuditLog
from app.models.enums import LeaveStatus
from app.models.leave import LeaveRequest
from app.schemas.report import AuditLogEntryResponse, AuditLogListResponse, LeaveSummaryResponse
from app.services.config import get_config

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


async def query_audit_log(
    session: AsyncSession,
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    action: str | None = None,
    actor_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """Query audit log entries with optional filters, newest first.

    ``end_date`` is inclusive of the whole day.
    """
    filters = []

    if entity_type is not None:
        filters.append(col(AuditLog.entity_type) == entity_type)
    if entity_id is not None:
        filters.append(col(AuditLog.entity_id) == entity_id)
    if action is not None:
        filters.append(col(AuditLog.action) == action)
    if actor_id is not None:
        filters.append(col(AuditLog.actor_id) == actor_id)
    if start_date is not None:
        filters.append(col(AuditLog.created_at) >= datetime.combine(start_date, time.min))
    if end_date is not None:
        filters.append(col(AuditLog.created_at) < datetime.combine(end_date + timedelta(days=1), time.min))

    count_result = await session.execute(select(func.count()).select_from(AuditLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditLog).where(*filters).order_by(col(AuditLog.created_at).desc()).offset(offset).limit(limit)
    )
    entries = list(result.scalars().all())

    return AuditLogListResponse(
        items=[
            AuditLogEntryResponse(
                id=e.id,
                actor_id=e.actor_id,
                entity_type=e.entity_type,
                entity_id=e.entity_id,
                action=e.action,
                before_json=e.before_json,
                after_json=e.after_json,
                created_at=e.created_at,
            )
            for e in entries
        ],
        total=total,
    )


async def get_leave_summary(session: AsyncSession, year: int) -> LeaveSummaryResponse:
    """Count the year's leave requests by status and by leave type."""
    config = await get_config(session, year)
    year_filter = (
        col(LeaveRequest.from_date) >= date(year, 1, 1),
        col(LeaveRequest.from_date) <= date(year, 12, 31),
    )

    status_result = await session.execute(
        select(LeaveRequest.status, func.count()).where(*year_filter).group_by(col(LeaveRequest.status))
    )
    by_status = {s.value: 0 for s in LeaveStatus}
    for status, count in status_result.all():
        by_status[status] = count

    type_result = await session.execute(
        select(LeaveRequest.leave_type, func.count())
        .where(*year_filter)
        .group_by(col(LeaveRequest.leave_type))
        .order_by(col(LeaveRequest.leave_type))
    )
    by_type = {leave_type: count for leave_type, count in type_result.all()}

    return LeaveSummaryResponse(
        year=year,
        config_defined=config is not None,
        config_locked=bool(config is not None and config.is_locked),
        total=sum(by_status.values()),
        by_status=by_status,
        by_type=by_type,
    )
