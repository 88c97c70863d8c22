# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from app.api.deps import AdminDep
from app.db import SessionDep
from app.schemas.report import AuditLogListResponse, LeaveSummaryResponse
from app.services import report as report_service

reports_router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


def _current_year() -> int:
    return date.today().year


@reports_router.get("/audit-log", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: AdminDep,
    entity_type: str | None = Query(default=None),
    entity_id: str | None = Query(default=None),
    action: str | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query audit log entries with optional filters (admin only)."""
    return await report_service.query_audit_log(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )


@reports_router.get("/leave-summary", response_model=LeaveSummaryResponse)
async def get_leave_summary(
    session: SessionDep,
    auth: AdminDep,
    year: int = Query(default_factory=_current_year, ge=2000, le=2100),
) -> LeaveSummaryResponse:
    """Count the year's leave requests by status and leave type (admin only)."""
    return await report_service.get_leave_summary(session, year)
