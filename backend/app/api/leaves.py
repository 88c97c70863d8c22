# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from app.api.deps import AuthDep, ManagerDep
from app.db import SessionDep
from app.models.enums import LeaveDecision, LeaveStatus
from app.schemas.leave import ApplyLeaveRequest, DecisionPayload, LeaveListResponse, LeaveResponse
from app.services import leave as leave_service

leaves_router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    payload: ApplyLeaveRequest,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Apply for leave. The request starts PENDING."""
    return await leave_service.apply_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    leave_type: str | None = Query(default=None),
    requested_by: uuid.UUID | None = Query(default=None),
    approver_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveListResponse:
    """List leave requests visible to the caller."""
    return await leave_service.list_leaves(
        session, auth, status_filter, leave_type, requested_by, approver_id, offset, limit
    )


@leaves_router.get("/{request_id}", response_model=LeaveResponse)
async def get_leave(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Get a single leave request."""
    return await leave_service.get_leave(session, auth, request_id)


@leaves_router.post("/{request_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Approve a pending leave request (assigned approver or admin)."""
    return await leave_service.decide_leave(session, auth, request_id, LeaveDecision.APPROVED, payload)


@leaves_router.post("/{request_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Reject a pending leave request (assigned approver or admin)."""
    return await leave_service.decide_leave(session, auth, request_id, LeaveDecision.REJECTED, payload)


@leaves_router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_leave(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> Response:
    """Cancel your own pending leave request. The request is removed."""
    await leave_service.cancel_leave(session, auth, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
