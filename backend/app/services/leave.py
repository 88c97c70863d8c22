# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from app.exceptions import AppError, AuthorizationError, ConflictError, NotFoundError, StateError, ValidationError
from app.models.base import now_utc
from app.models.enums import AuditAction, AuditEntityType, LeaveDecision, LeaveStatus, Role
from app.models.guard import LeaveApplyGuard
from app.models.leave import LeaveRequest
from app.schemas.leave import LeaveListResponse, LeaveResponse
from app.services.audit import model_to_audit_dict, record_audit
from app.services.balance import BalanceResolver
from app.services.config import load_calendar
from app.services.directory import get_user_directory
from app.services.notification import notify_leave_applied, notify_leave_cancelled, notify_leave_decided

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.leave import ApplyLeaveRequest, DecisionPayload
    from app.services.directory import UserDirectory, UserInfo

logger = logging.getLogger(__name__)

# Requests in these states block overlapping applications by the same user.
_ACTIVE_STATUSES = [LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value]
_APPLY_CONFLICT = "Another leave application for this user is in progress, try again"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(leave: LeaveRequest) -> LeaveResponse:
    """Map a leave request model to its response schema."""
    return LeaveResponse(
        id=leave.id,
        requested_by=leave.requested_by,
        approver_id=leave.approver_id,
        from_date=leave.from_date,
        to_date=leave.to_date,
        leave_type=leave.leave_type,
        reason=leave.reason,
        status=LeaveStatus(leave.status),
        working_days=leave.working_days,
        approver_comment=leave.approver_comment,
        decided_at=leave.decided_at,
        decided_by=leave.decided_by,
        created_at=leave.created_at,
    )


async def _get_leave_or_404(session: AsyncSession, request_id: uuid.UUID, *, for_update: bool = False) -> LeaveRequest:
    """Fetch a leave request by ID. Raises 404 if not found.

    With ``for_update`` the row is locked and reloaded from the database.
    """
    stmt = select(LeaveRequest).where(col(LeaveRequest.id) == request_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(stmt)
    leave = result.scalar_one_or_none()
    if leave is None:
        raise NotFoundError("Leave request not found")
    return leave


async def _find_overlap(
    session: AsyncSession,
    user_id: uuid.UUID,
    from_date: date,
    to_date: date,
) -> LeaveRequest | None:
    """Return an active request of the user intersecting [from_date, to_date], if any.

    Inclusive ranges overlap when existing.from <= new.to AND existing.to >= new.from.
    That covers a new start inside, a new end inside, and full containment either way.
    """
    result = await session.execute(
        select(LeaveRequest)
        .where(
            col(LeaveRequest.requested_by) == user_id,
            col(LeaveRequest.status).in_(_ACTIVE_STATUSES),
            col(LeaveRequest.from_date) <= to_date,
            col(LeaveRequest.to_date) >= from_date,
        )
        .order_by(col(LeaveRequest.from_date))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _lock_apply_guard(session: AsyncSession, user_id: uuid.UUID, year: int) -> LeaveApplyGuard:
    """Lock the user's guard row for the year with FOR UPDATE, creating it if absent.

    The version read here is bumped with a compare-and-set before the insert
    (see ``_bump_apply_guard``), so a concurrent application that passed its
    checks against the same version is refused even where FOR UPDATE is a no-op.
    """
    result = await session.execute(
        select(LeaveApplyGuard)
        .where(
            col(LeaveApplyGuard.user_id) == user_id,
            col(LeaveApplyGuard.year) == year,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    guard = result.scalar_one_or_none()
    if guard is None:
        guard = LeaveApplyGuard(user_id=user_id, year=year)
        session.add(guard)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            raise ConflictError(_APPLY_CONFLICT) from None
    return guard


async def _bump_apply_guard(session: AsyncSession, guard: LeaveApplyGuard, read_version: int) -> None:
    """Advance the guard version only if nobody else did since it was read."""
    result = await session.execute(
        update(LeaveApplyGuard)
        .where(
            col(LeaveApplyGuard.user_id) == guard.user_id,
            col(LeaveApplyGuard.year) == guard.year,
            col(LeaveApplyGuard.version) == read_version,
        )
        .values(version=read_version + 1, updated_at=now_utc())
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        await session.rollback()
        raise ConflictError(_APPLY_CONFLICT)


async def _resolve_approver(directory: UserDirectory, requester: UserInfo) -> UserInfo | None:
    """Pick who decides the requester's leave. Never the requester themselves.

    Employees go to their manager; managers, admins and unmanaged employees
    go to an admin. None when no eligible admin exists.
    """
    if requester.role == Role.EMPLOYEE and requester.manager_id is not None:
        manager = await directory.get_user(requester.manager_id)
        if manager is not None and manager.id != requester.id:
            return manager

    admins = [a for a in await directory.list_admins() if a.id != requester.id]
    if not admins:
        logger.warning("No admin available to approve leave for user %s", requester.id)
        return None
    return admins[0]


async def _ensure_can_view(auth: AuthContext, leave: LeaveRequest) -> None:
    if auth.is_admin or auth.user_id in (leave.requested_by, leave.approver_id):
        return
    requester = await get_user_directory().get_user(leave.requested_by)
    if requester is None or requester.manager_id != auth.user_id:
        raise AuthorizationError("Not authorized to view this leave request")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def apply_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: ApplyLeaveRequest,
) -> LeaveResponse:
    """Apply for leave, creating a PENDING request.

    Flow:
    1. Validate the date range (inclusive, within one calendar year)
    2. Resolve the requester and the year's configuration
    3. Check the leave type is configured for the year
    4. Lock the user's apply guard for the year
    5. Reject overlaps with the user's pending or approved requests
    6. Count working days; reject an empty span
    7. Enforce remaining balance >= span
    8. Resolve the approver and insert the request
    9. Commit, then audit and notify
    """
    from_date, to_date = payload.from_date, payload.to_date
    leave_type = payload.leave_type

    # 1. Date range.
    if to_date < from_date:
        raise ValidationError("To date cannot be before from date")
    if from_date.year != to_date.year:
        raise ValidationError("Leave cannot span two calendar years; apply separately for each year")
    year = from_date.year

    # 2. Requester and configuration.
    directory = get_user_directory()
    requester = await directory.get_user(auth.user_id)
    if requester is None:
        raise NotFoundError("User not found")

    resolver = BalanceResolver(session)
    loaded = await resolver.calendar_for(year)
    if loaded is None:
        raise ValidationError(f"No leave configuration defined for {year}")
    config, policy = loaded

    # 3. Leave type.
    if leave_type not in (config.leave_types_json or {}):
        raise ValidationError(f"Leave type '{leave_type}' is not configured for {year}")

    # 4. Serialise with other applications by this user for this year.
    guard = await _lock_apply_guard(session, auth.user_id, year)
    read_version = guard.version

    try:
        # 5. Overlap.
        overlapping = await _find_overlap(session, auth.user_id, from_date, to_date)
        if overlapping is not None:
            raise ValidationError(
                f"Leave dates overlap with an existing {overlapping.status.lower()} leave "
                f"({overlapping.from_date.isoformat()} to {overlapping.to_date.isoformat()})"
            )

        # 6. Working days.
        working_days = policy.count_working_days(from_date, to_date)
        if working_days == 0:
            raise ValidationError("Selected dates contain no working days")

        # 7. Balance.
        remaining = await resolver.remaining(auth.user_id, leave_type, year)
        if remaining < working_days:
            raise ValidationError(
                f"Insufficient {leave_type} leave balance. Available: {remaining}, "
                f"Required: {working_days}, Short by: {working_days - remaining}"
            )
    except AppError:
        await session.rollback()
        raise

    # 8. Insert, once the guard version still matches what the checks ran against.
    await _bump_apply_guard(session, guard, read_version)
    approver = await _resolve_approver(directory, requester)
    leave = LeaveRequest(
        requested_by=auth.user_id,
        approver_id=approver.id if approver is not None else None,
        from_date=from_date,
        to_date=to_date,
        leave_type=leave_type,
        reason=payload.reason,
        status=LeaveStatus.PENDING.value,
        working_days=working_days,
    )
    session.add(leave)
    await session.flush()

    # 9. Commit, audit, notify.
    await session.commit()
    await session.refresh(leave)
    response = _build_leave_response(leave)

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=str(response.id),
        action=AuditAction.APPLY,
        after_json=response.model_dump(mode="json"),
    )
    notify_leave_applied(requester, approver, response)
    return response


async def decide_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    decision: LeaveDecision,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Approve or reject a pending request.

    Only the assigned approver or an admin may decide, and never the
    requester. The working-day span is recomputed with the year's current
    configuration; no balance is stored, so nothing else changes.
    """
    leave = await _get_leave_or_404(session, request_id, for_update=True)

    if auth.role not in (Role.MANAGER, Role.ADMIN):
        raise AuthorizationError("Manager or admin role required to decide leave requests")
    if leave.requested_by == auth.user_id:
        raise AuthorizationError("You cannot decide your own leave request")
    if auth.role == Role.MANAGER and leave.approver_id != auth.user_id:
        raise AuthorizationError("Only the assigned approver or an admin can decide this leave request")

    if leave.status != LeaveStatus.PENDING.value:
        raise StateError(f"Leave request is already {leave.status.lower()}")

    year = leave.from_date.year
    loaded = await load_calendar(session, year)
    if loaded is None:
        raise NotFoundError(f"No leave configuration defined for {year}")
    _, policy = loaded

    working_days = policy.count_working_days(leave.from_date, leave.to_date)
    if working_days != leave.working_days:
        logger.warning(
            "Working days for leave %s changed from %d to %d since it was applied",
            leave.id,
            leave.working_days,
            working_days,
        )

    before_dict = model_to_audit_dict(leave)

    # Conditional on PENDING so a concurrent decision or cancellation wins at most once.
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == request_id,
            col(LeaveRequest.status) == LeaveStatus.PENDING.value,
        )
        .values(
            status=LeaveStatus(decision.value).value,
            working_days=working_days,
            approver_comment=payload.comment if payload else None,
            decided_at=now_utc(),
            decided_by=auth.user_id,
        )
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        await session.rollback()
        raise StateError("Leave request was already decided or cancelled")

    await session.commit()
    await session.refresh(leave)
    response = _build_leave_response(leave)

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=str(response.id),
        action=AuditAction.APPROVE if decision == LeaveDecision.APPROVED else AuditAction.REJECT,
        before_json=before_dict,
        after_json=response.model_dump(mode="json"),
    )
    notify_leave_decided(await get_user_directory().get_user(response.requested_by), response)
    return response


async def cancel_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> None:
    """Cancel a pending request by deleting it. Only the requester can cancel."""
    leave = await _get_leave_or_404(session, request_id, for_update=True)

    if leave.requested_by != auth.user_id:
        raise AuthorizationError("You can only cancel your own leave requests")
    if leave.status != LeaveStatus.PENDING.value:
        raise StateError("Only pending leave requests can be cancelled")

    snapshot = _build_leave_response(leave)
    before_dict = model_to_audit_dict(leave)

    result = await session.execute(
        delete(LeaveRequest).where(
            col(LeaveRequest.id) == request_id,
            col(LeaveRequest.status) == LeaveStatus.PENDING.value,
        )
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        await session.rollback()
        raise StateError("Only pending leave requests can be cancelled")
    await session.commit()

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=str(snapshot.id),
        action=AuditAction.CANCEL,
        before_json=before_dict,
    )
    notify_leave_cancelled(await get_user_directory().get_user(snapshot.requested_by), snapshot)


async def get_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveResponse:
    """Get a single request visible to the actor."""
    leave = await _get_leave_or_404(session, request_id)
    await _ensure_can_view(auth, leave)
    return _build_leave_response(leave)


async def list_leaves(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: LeaveStatus | None = None,
    leave_type: str | None = None,
    requested_by: uuid.UUID | None = None,
    approver_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveListResponse:
    """List requests visible to the actor, newest first.

    Employees see their own requests, managers their own plus those they
    approve, admins everything.
    """
    filters = []
    if auth.role == Role.EMPLOYEE:
        filters.append(col(LeaveRequest.requested_by) == auth.user_id)
    elif auth.role == Role.MANAGER:
        filters.append(
            or_(
                col(LeaveRequest.requested_by) == auth.user_id,
                col(LeaveRequest.approver_id) == auth.user_id,
            )
        )

    if status_filter is not None:
        filters.append(col(LeaveRequest.status) == status_filter.value)
    if leave_type is not None:
        filters.append(col(LeaveRequest.leave_type) == leave_type.lower())
    if requested_by is not None:
        filters.append(col(LeaveRequest.requested_by) == requested_by)
    if approver_id is not None:
        filters.append(col(LeaveRequest.approver_id) == approver_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    leaves = list(result.scalars().all())

    return LeaveListResponse(
        items=[_build_leave_response(leave) for leave in leaves],
        total=total,
    )
