# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from app.api.deps import AdminDep, AuthDep
from app.db import SessionDep
from app.schemas.config import ConfigResponse, CreateConfigRequest, UpsertConfigRequest, WorkingDaysResponse
from app.services import config as config_service

configs_router = APIRouter(
    prefix="/configs",
    tags=["configs"],
)

Year = Annotated[int, Path(ge=2000, le=2100)]


@configs_router.post("", response_model=ConfigResponse, status_code=status.HTTP_201_CREATED)
async def create_config(
    payload: CreateConfigRequest,
    session: SessionDep,
    auth: AdminDep,
) -> ConfigResponse:
    """Create the leave configuration for a year (admin only)."""
    return await config_service.create_config(session, auth, payload)


@configs_router.get("/current", response_model=ConfigResponse)
async def get_current_config(
    session: SessionDep,
    auth: AuthDep,
) -> ConfigResponse:
    """Get the configuration for the current calendar year."""
    return await config_service.get_current_config_response(session)


@configs_router.get("/{year}", response_model=ConfigResponse)
async def get_config(
    year: Year,
    session: SessionDep,
    auth: AuthDep,
) -> ConfigResponse:
    """Get the configuration for a year."""
    return await config_service.get_config_response(session, year)


@configs_router.patch("/{year}", response_model=ConfigResponse)
async def upsert_config(
    payload: UpsertConfigRequest,
    year: Year,
    session: SessionDep,
    auth: AdminDep,
) -> ConfigResponse:
    """Create the year's configuration with defaults, or merge the provided fields (admin only)."""
    return await config_service.upsert_config(session, auth, year, payload)


@configs_router.post("/{year}/lock", response_model=ConfigResponse)
async def lock_config(
    year: Year,
    session: SessionDep,
    auth: AdminDep,
) -> ConfigResponse:
    """Lock a year's configuration against further edits (admin only, lock mode)."""
    return await config_service.lock_config(session, auth, year)


@configs_router.get("/{year}/working-days", response_model=WorkingDaysResponse)
async def count_working_days(
    year: Year,
    session: SessionDep,
    auth: AuthDep,
    from_date: date = Query(),
    to_date: date = Query(),
) -> WorkingDaysResponse:
    """Count working days in an inclusive date range under the year's calendar."""
    return await config_service.count_working_days_for(session, year, from_date, to_date)
