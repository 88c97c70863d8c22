"""Leave balance derivation.

Remaining balance is never stored. It is recomputed from the request ledger:

    remaining = max(0, entitlement - sum(working days of consuming requests))

Consuming requests are the user's APPROVED requests of the leave type whose
from_date falls in the year, plus PENDING ones when
``Settings.count_pending_leaves`` is enabled. Working days are counted under
the year's current calendar.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.config import get_settings
from app.exceptions import AuthorizationError
from app.models.enums import LeaveStatus
from app.models.leave import LeaveRequest
from app.schemas.balance import BalanceListResponse, BalanceResponse
from app.services.config import load_calendar
from app.services.directory import get_user_directory

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from app.models.config import YearConfig
    from app.schemas.auth import AuthContext
    from app.services.workdays import CalendarPolicy


class BalanceResolver:
    """Computes balances for one request scope, memoising calendars and consumption."""

    def __init__(self, session: AsyncSession, *, count_pending: bool | None = None) -> None:
        self._session = session
        if count_pending is None:
            count_pending = get_settings().count_pending_leaves
        self._statuses = [LeaveStatus.APPROVED.value]
        if count_pending:
            self._statuses.append(LeaveStatus.PENDING.value)
        self._calendars: dict[int, tuple[YearConfig, CalendarPolicy] | None] = {}
        self._consumed: dict[tuple[uuid.UUID, str, int], int] = {}

    async def calendar_for(self, year: int) -> tuple[YearConfig, CalendarPolicy] | None:
        if year not in self._calendars:
            self._calendars[year] = await load_calendar(self._session, year)
        return self._calendars[year]

    async def consumed(self, user_id: uuid.UUID, leave_type: str, year: int) -> int:
        """Working days already taken (or reserved) by the user for a leave type in a year."""
        key = (user_id, leave_type, year)
        if key in self._consumed:
            return self._consumed[key]

        loaded = await self.calendar_for(year)
        if loaded is None:
            self._consumed[key] = 0
            return 0
        _, policy = loaded

        result = await self._session.execute(
            select(LeaveRequest).where(
                col(LeaveRequest.requested_by) == user_id,
                col(LeaveRequest.leave_type) == leave_type,
                col(LeaveRequest.status).in_(self._statuses),
                col(LeaveRequest.from_date) >= date(year, 1, 1),
                col(LeaveRequest.from_date) <= date(year, 12, 31),
            )
        )
        total = sum(policy.count_working_days(r.from_date, r.to_date) for r in result.scalars().all())
        self._consumed[key] = total
        return total

    async def entitlement(self, leave_type: str, year: int) -> int:
        loaded = await self.calendar_for(year)
        if loaded is None:
            return 0
        config, _ = loaded
        return int((config.leave_types_json or {}).get(leave_type, 0))

    async def remaining(self, user_id: uuid.UUID, leave_type: str, year: int) -> int:
        entitlement = await self.entitlement(leave_type, year)
        return max(0, entitlement - await self.consumed(user_id, leave_type, year))

    async def balance(self, user_id: uuid.UUID, leave_type: str, year: int) -> BalanceResponse:
        entitlement = await self.entitlement(leave_type, year)
        consumed = await self.consumed(user_id, leave_type, year)
        return BalanceResponse(
            user_id=user_id,
            leave_type=leave_type,
            year=year,
            entitlement=entitlement,
            consumed=consumed,
            remaining=max(0, entitlement - consumed),
        )


async def _ensure_can_view(auth: AuthContext, user_id: uuid.UUID) -> None:
    """Users see their own balances, managers their reportees', admins everyone's."""
    if auth.is_admin or auth.user_id == user_id:
        return
    user = await get_user_directory().get_user(user_id)
    if user is None or user.manager_id != auth.user_id:
        raise AuthorizationError("Not authorized to view this user's balances")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def get_remaining_balance(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: str,
    year: int,
) -> int:
    """Remaining working days for a user and leave type. 0 when the year is unconfigured."""
    return await BalanceResolver(session).remaining(user_id, leave_type, year)


async def get_balance(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    leave_type: str,
    year: int,
) -> BalanceResponse:
    """Balance breakdown for one leave type."""
    await _ensure_can_view(auth, user_id)
    return await BalanceResolver(session).balance(user_id, leave_type, year)


async def list_balances(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    year: int,
) -> BalanceListResponse:
    """Balance breakdown for every leave type configured in the year."""
    await _ensure_can_view(auth, user_id)
    resolver = BalanceResolver(session)
    loaded = await resolver.calendar_for(year)

    items: list[BalanceResponse] = []
    if loaded is not None:
        config, _ = loaded
        for leave_type in sorted(config.leave_types_json or {}):
            items.append(await resolver.balance(user_id, leave_type, year))

    return BalanceListResponse(user_id=user_id, year=year, items=items, total=len(items))
