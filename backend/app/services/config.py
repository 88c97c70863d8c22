"""Yearly leave configuration: working-day rule, holidays and leave-type entitlements.

A deployment runs in one of two edit modes (``Settings.config_edit_mode``):

- ``upsert``: every year stays mutable; partial updates merge field by field.
- ``lock``: a year may be edited until an admin locks it, then never again.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from app.config import get_settings
from app.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from app.models.base import now_utc
from app.models.config import ConfigHoliday, YearConfig
from app.models.enums import AuditAction, AuditEntityType
from app.schemas.config import ConfigResponse, HolidayEntry, WorkingDaysResponse
from app.services.audit import model_to_audit_dict, record_audit
from app.services.notification import notify_config_changed
from app.services.workdays import CalendarPolicy

if TYPE_CHECKING:
    import uuid
    from typing import Any

    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.config import CreateConfigRequest, UpsertConfigRequest

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES: dict[str, int] = {"casual": 12, "sick": 8, "earned": 20}
DEFAULT_WORKING_DAYS_PER_WEEK = 5
_SUNDAY = 6


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_config_response(config: YearConfig, holidays: list[ConfigHoliday]) -> ConfigResponse:
    """Map a configuration and its holidays to the response schema."""
    return ConfigResponse(
        id=config.id,
        year=config.year,
        working_days_per_week=config.working_days_per_week,
        holidays=[HolidayEntry(date=h.date, name=h.name) for h in sorted(holidays, key=lambda h: h.date)],
        leave_types=dict(config.leave_types_json or {}),
        is_locked=config.is_locked,
        created_by=config.created_by,
        updated_by=config.updated_by,
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


def _config_audit_dict(config: YearConfig, holidays: list[ConfigHoliday]) -> dict[str, Any]:
    data = model_to_audit_dict(config)
    data["holidays"] = {h.date.isoformat(): h.name for h in holidays}
    return data


async def _fetch_holidays(session: AsyncSession, config_id: uuid.UUID) -> list[ConfigHoliday]:
    result = await session.execute(
        select(ConfigHoliday).where(col(ConfigHoliday.config_id) == config_id).order_by(col(ConfigHoliday.date))
    )
    return list(result.scalars().all())


async def _get_config_or_404(session: AsyncSession, year: int) -> YearConfig:
    config = await get_config(session, year)
    if config is None:
        raise NotFoundError(f"Configuration for year {year} not found")
    return config


def validate_holidays(year: int, holidays: list[HolidayEntry], *, forbid_sunday: bool) -> None:
    """Reject holidays outside the configuration's year, and Sunday holidays when forbidden."""
    for holiday in holidays:
        if holiday.date.year != year:
            raise ValidationError(f"Holiday date {holiday.date.isoformat()} must fall within {year}")
        if forbid_sunday and holiday.date.weekday() == _SUNDAY:
            raise ValidationError(f"Holiday date {holiday.date.isoformat()} falls on a Sunday")


def _replace_holidays(session: AsyncSession, config: YearConfig, holidays: list[HolidayEntry]) -> list[ConfigHoliday]:
    rows = [ConfigHoliday(config_id=config.id, date=h.date, name=h.name) for h in holidays]
    session.add_all(rows)
    return rows


def policy_from_config(config: YearConfig, holidays: list[ConfigHoliday]) -> CalendarPolicy:
    """Build the calendar policy for a stored configuration."""
    return CalendarPolicy(
        working_days_per_week=config.working_days_per_week,
        holidays={h.date: h.name for h in holidays},
    )


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_config(session: AsyncSession, year: int) -> YearConfig | None:
    """Return the configuration for a year, or None when no policy is defined."""
    result = await session.execute(select(YearConfig).where(col(YearConfig.year) == year))
    return result.scalar_one_or_none()


async def load_calendar(session: AsyncSession, year: int) -> tuple[YearConfig, CalendarPolicy] | None:
    """Return the configuration and its calendar policy, or None when the year is unconfigured."""
    config = await get_config(session, year)
    if config is None:
        return None
    holidays = await _fetch_holidays(session, config.id)
    return config, policy_from_config(config, holidays)


async def get_config_response(session: AsyncSession, year: int) -> ConfigResponse:
    config = await _get_config_or_404(session, year)
    return _build_config_response(config, await _fetch_holidays(session, config.id))


async def get_current_config_response(session: AsyncSession) -> ConfigResponse:
    """Configuration for the current calendar year."""
    return await get_config_response(session, date.today().year)


async def count_working_days_for(
    session: AsyncSession,
    year: int,
    from_date: date,
    to_date: date,
) -> WorkingDaysResponse:
    """Count working days in a range under the given year's calendar."""
    if to_date < from_date:
        raise ValidationError("to_date cannot be before from_date")
    loaded = await load_calendar(session, year)
    if loaded is None:
        raise NotFoundError(f"Configuration for year {year} not found")
    _, policy = loaded
    return WorkingDaysResponse(
        year=year,
        from_date=from_date,
        to_date=to_date,
        working_days=policy.count_working_days(from_date, to_date),
    )


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def _insert_config(
    session: AsyncSession,
    auth: AuthContext,
    year: int,
    working_days_per_week: int,
    holidays: list[HolidayEntry],
    leave_types: dict[str, int],
) -> ConfigResponse:
    """Insert a new configuration with its holidays, commit, and audit."""
    validate_holidays(year, holidays, forbid_sunday=get_settings().forbid_sunday_holidays)

    config = YearConfig(
        year=year,
        working_days_per_week=working_days_per_week,
        leave_types_json=dict(leave_types),
        created_by=auth.user_id,
    )
    session.add(config)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Configuration for year {year} already exists") from None

    rows = _replace_holidays(session, config, holidays)
    await session.flush()

    await session.commit()
    await session.refresh(config)
    response = _build_config_response(config, rows)

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.YEAR_CONFIG,
        entity_id=str(year),
        action=AuditAction.CREATE,
        after_json=_config_audit_dict(config, rows),
    )
    notify_config_changed(year, "set")
    logger.info("Leave configuration for %d created by %s", year, auth.user_id)
    return response


async def create_config(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateConfigRequest,
) -> ConfigResponse:
    """Create the configuration for a year. Raises 409 if the year is already configured."""
    if await get_config(session, payload.year) is not None:
        raise ConflictError(f"Configuration for year {payload.year} already exists")

    return await _insert_config(
        session,
        auth,
        payload.year,
        payload.working_days_per_week,
        payload.holidays,
        payload.leave_types,
    )


async def upsert_config(
    session: AsyncSession,
    auth: AuthContext,
    year: int,
    payload: UpsertConfigRequest,
) -> ConfigResponse:
    """Create the year's configuration if absent, else merge only the provided fields.

    Holidays and leave types are replaced as whole fields when given.
    Only available in upsert mode; lock-mode deployments create with
    ``create_config`` and freeze with ``lock_config``.
    """
    settings = get_settings()
    if settings.config_edit_mode == "lock":
        raise StateError("Configuration updates are disabled; this deployment uses lock mode")

    config = await get_config(session, year)

    if config is None:
        return await _insert_config(
            session,
            auth,
            year,
            payload.working_days_per_week or DEFAULT_WORKING_DAYS_PER_WEEK,
            payload.holidays or [],
            payload.leave_types if payload.leave_types is not None else DEFAULT_LEAVE_TYPES,
        )

    holidays = await _fetch_holidays(session, config.id)
    provided = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not provided:
        return _build_config_response(config, holidays)

    before_dict = _config_audit_dict(config, holidays)

    if payload.holidays is not None:
        validate_holidays(year, payload.holidays, forbid_sunday=settings.forbid_sunday_holidays)
        await session.execute(delete(ConfigHoliday).where(col(ConfigHoliday.config_id) == config.id))
        holidays = _replace_holidays(session, config, payload.holidays)
    if payload.working_days_per_week is not None:
        config.working_days_per_week = payload.working_days_per_week
    if payload.leave_types is not None:
        config.leave_types_json = dict(payload.leave_types)

    config.updated_by = auth.user_id
    config.updated_at = now_utc()
    await session.flush()

    await session.commit()
    await session.refresh(config)
    response = _build_config_response(config, holidays)

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.YEAR_CONFIG,
        entity_id=str(year),
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=_config_audit_dict(config, holidays),
    )
    notify_config_changed(year, f"updated ({', '.join(sorted(provided))})")
    return response


async def lock_config(
    session: AsyncSession,
    auth: AuthContext,
    year: int,
) -> ConfigResponse:
    """Lock a year's configuration against further edits (lock mode only)."""
    if get_settings().config_edit_mode != "lock":
        raise StateError("Configuration locking is disabled; this deployment uses upsert mode")

    config = await _get_config_or_404(session, year)
    if config.is_locked:
        raise StateError(f"Configuration for year {year} is already locked")

    holidays = await _fetch_holidays(session, config.id)
    before_dict = _config_audit_dict(config, holidays)

    config.is_locked = True
    config.updated_by = auth.user_id
    config.updated_at = now_utc()
    await session.flush()

    await session.commit()
    await session.refresh(config)
    response = _build_config_response(config, holidays)

    await record_audit(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.YEAR_CONFIG,
        entity_id=str(year),
        action=AuditAction.LOCK,
        before_json=before_dict,
        after_json=_config_audit_dict(config, holidays),
    )
    notify_config_changed(year, "locked")
    return response
