# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.balance import BalanceListResponse, BalanceResponse
from app.services import balance as balance_service

balances_router = APIRouter(
    prefix="/users/{user_id}/balances",
    tags=["balances"],
)


def _current_year() -> int:
    return date.today().year


@balances_router.get("", response_model=BalanceListResponse)
async def list_balances(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(default_factory=_current_year, ge=2000, le=2100),
) -> BalanceListResponse:
    """Get the user's balance for every leave type configured in the year."""
    return await balance_service.list_balances(session, auth, user_id, year)


@balances_router.get("/{leave_type}", response_model=BalanceResponse)
async def get_balance(
    user_id: uuid.UUID,
    leave_type: str,
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(default_factory=_current_year, ge=2000, le=2100),
) -> BalanceResponse:
    """Get the user's balance for one leave type."""
    return await balance_service.get_balance(session, auth, user_id, leave_type.strip().lower(), year)
