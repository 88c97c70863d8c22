"""Tests for yearly configuration: create, upsert, lock, reads and working-day counts."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.models.audit import AuditLog
from tests.helpers import ADMIN_HEADERS, CONFIGS_URL, EMPLOYEE_HEADERS, MANAGER_HEADERS, YEAR, create_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.config import Settings


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_config(async_client: AsyncClient) -> None:
    data = await create_config(
        async_client,
        holidays=[
            {"date": "2025-12-25", "name": "Christmas"},
            {"date": "2025-01-01", "name": "New Year"},
        ],
        leave_types={"Casual": 10},
    )
    assert data["year"] == YEAR
    assert data["working_days_per_week"] == 5
    assert data["leave_types"] == {"casual": 10}
    assert data["is_locked"] is False
    assert data["updated_by"] is None
    assert [h["date"] for h in data["holidays"]] == ["2025-01-01", "2025-12-25"]


async def test_create_config_twice_conflicts(async_client: AsyncClient) -> None:
    await create_config(async_client)
    resp = await async_client.post(
        CONFIGS_URL,
        json={"year": YEAR, "working_days_per_week": 6, "leave_types": {"casual": 1}},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "ConflictError"

    current = await async_client.get(f"{CONFIGS_URL}/{YEAR}", headers=EMPLOYEE_HEADERS)
    assert current.json()["working_days_per_week"] == 5


async def test_create_config_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={"year": YEAR, "working_days_per_week": 5, "leave_types": {"casual": 1}},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "AuthorizationError"


async def test_create_config_rejects_unsupported_week(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={"year": YEAR, "working_days_per_week": 7, "leave_types": {"casual": 1}},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


async def test_create_config_rejects_negative_entitlement(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={"year": YEAR, "working_days_per_week": 5, "leave_types": {"casual": -1}},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


async def test_create_config_rejects_duplicate_holidays(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={
            "year": YEAR,
            "working_days_per_week": 5,
            "holidays": [{"date": "2025-05-01"}, {"date": "2025-05-01", "name": "Again"}],
            "leave_types": {"casual": 1},
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


async def test_create_config_rejects_holiday_outside_year(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={
            "year": YEAR,
            "working_days_per_week": 5,
            "holidays": [{"date": "2026-01-01", "name": "New Year"}],
            "leave_types": {"casual": 1},
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 400
    assert "must fall within 2025" in resp.json()["detail"]


async def test_create_config_rejects_sunday_holiday(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        CONFIGS_URL,
        json={
            "year": YEAR,
            "working_days_per_week": 5,
            "holidays": [{"date": "2025-03-16", "name": "Sunday"}],
            "leave_types": {"casual": 1},
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert "Sunday" in resp.json()["detail"]


async def test_sunday_holiday_allowed_when_not_forbidden(
    async_client: AsyncClient,
    override_settings: Callable[..., Settings],
) -> None:
    override_settings(forbid_sunday_holidays=False)
    data = await create_config(async_client, holidays=[{"date": "2025-03-16", "name": "Sunday"}])
    assert data["holidays"] == [{"date": "2025-03-16", "name": "Sunday"}]


async def test_create_config_writes_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await create_config(async_client)
    result = await db_session.execute(select(AuditLog).where(col(AuditLog.entity_type) == "YEAR_CONFIG"))
    entries = list(result.scalars().all())
    assert len(entries) == 1
    assert entries[0].action == "CREATE"
    assert entries[0].entity_id == str(YEAR)
    assert entries[0].before_json is None
    assert entries[0].after_json is not None
    assert entries[0].after_json["year"] == YEAR


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def test_get_config_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{CONFIGS_URL}/{YEAR}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"


async def test_get_config_year_out_of_range(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{CONFIGS_URL}/1999", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 422


async def test_get_current_config(async_client: AsyncClient) -> None:
    this_year = date.today().year
    await create_config(async_client, year=this_year, holidays=[])
    resp = await async_client.get(f"{CONFIGS_URL}/current", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["year"] == this_year


async def test_requests_without_auth_headers_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{CONFIGS_URL}/{YEAR}")
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


async def test_upsert_creates_with_defaults(async_client: AsyncClient) -> None:
    resp = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["working_days_per_week"] == 5
    assert data["leave_types"] == {"casual": 12, "sick": 8, "earned": 20}
    assert data["holidays"] == []


async def test_upsert_merges_provided_fields(async_client: AsyncClient) -> None:
    await create_config(async_client, leave_types={"casual": 12, "sick": 8})
    resp = await async_client.patch(
        f"{CONFIGS_URL}/{YEAR}",
        json={"holidays": [{"date": "2025-08-15", "name": "Independence Day"}]},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["leave_types"] == {"casual": 12, "sick": 8}
    assert data["working_days_per_week"] == 5
    assert data["holidays"] == [{"date": "2025-08-15", "name": "Independence Day"}]
    assert data["updated_by"] == ADMIN_HEADERS["X-User-Id"]


async def test_upsert_replaces_holidays(async_client: AsyncClient) -> None:
    await create_config(async_client, holidays=[{"date": "2025-01-01", "name": "New Year"}])
    resp = await async_client.patch(
        f"{CONFIGS_URL}/{YEAR}",
        json={"holidays": [{"date": "2025-01-01", "name": "New Year's Day"}, {"date": "2025-05-01"}]},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["holidays"] == [
        {"date": "2025-01-01", "name": "New Year's Day"},
        {"date": "2025-05-01", "name": "Holiday"},
    ]


async def test_upsert_twice_is_idempotent(async_client: AsyncClient) -> None:
    await create_config(async_client)
    payload = {"working_days_per_week": 6, "leave_types": {"casual": 15}}
    first = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json=payload, headers=ADMIN_HEADERS)
    second = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json=payload, headers=ADMIN_HEADERS)
    assert first.status_code == second.status_code == 200
    for key in ("working_days_per_week", "leave_types", "holidays", "is_locked"):
        assert first.json()[key] == second.json()[key]


async def test_upsert_empty_payload_leaves_config_unchanged(
    async_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    created = await create_config(async_client)
    resp = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["updated_by"] is None
    assert resp.json()["leave_types"] == created["leave_types"]

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "UPDATE"))
    assert result.scalars().all() == []


async def test_upsert_rejects_sunday_holiday(async_client: AsyncClient) -> None:
    await create_config(async_client)
    resp = await async_client.patch(
        f"{CONFIGS_URL}/{YEAR}",
        json={"holidays": [{"date": "2025-03-16"}]},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 400


async def test_upsert_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_upsert_writes_audit_with_before_and_after(
    async_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    await create_config(async_client)
    await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={"working_days_per_week": 4}, headers=ADMIN_HEADERS)
    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "UPDATE"))
    entry = result.scalar_one()
    assert entry.before_json is not None
    assert entry.after_json is not None
    assert entry.before_json["working_days_per_week"] == 5
    assert entry.after_json["working_days_per_week"] == 4


# ---------------------------------------------------------------------------
# Lock
# ---------------------------------------------------------------------------


async def test_lock_refused_in_upsert_mode(async_client: AsyncClient) -> None:
    await create_config(async_client)
    resp = await async_client.post(f"{CONFIGS_URL}/{YEAR}/lock", headers=ADMIN_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "StateError"


async def test_lock_mode_freezes_config(
    async_client: AsyncClient,
    override_settings: Callable[..., Settings],
) -> None:
    override_settings(config_edit_mode="lock")
    await create_config(async_client)

    before_lock = await async_client.patch(
        f"{CONFIGS_URL}/{YEAR}", json={"working_days_per_week": 6}, headers=ADMIN_HEADERS
    )
    assert before_lock.status_code == 400
    assert before_lock.json()["error"] == "StateError"

    locked = await async_client.post(f"{CONFIGS_URL}/{YEAR}/lock", headers=ADMIN_HEADERS)
    assert locked.status_code == 200
    assert locked.json()["is_locked"] is True

    resp = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={"working_days_per_week": 4}, headers=ADMIN_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "StateError"

    again = await async_client.post(f"{CONFIGS_URL}/{YEAR}/lock", headers=ADMIN_HEADERS)
    assert again.status_code == 400

    current = await async_client.get(f"{CONFIGS_URL}/{YEAR}", headers=EMPLOYEE_HEADERS)
    assert current.json()["working_days_per_week"] == 5


async def test_lock_mode_refuses_upsert_of_missing_year(
    async_client: AsyncClient,
    override_settings: Callable[..., Settings],
) -> None:
    override_settings(config_edit_mode="lock")

    resp = await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={"working_days_per_week": 6}, headers=ADMIN_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "StateError"

    missing = await async_client.get(f"{CONFIGS_URL}/{YEAR}", headers=EMPLOYEE_HEADERS)
    assert missing.status_code == 404

    created = await create_config(async_client)
    assert created["year"] == YEAR


async def test_lock_missing_year(
    async_client: AsyncClient,
    override_settings: Callable[..., Settings],
) -> None:
    override_settings(config_edit_mode="lock")
    resp = await async_client.post(f"{CONFIGS_URL}/{YEAR}/lock", headers=ADMIN_HEADERS)
    assert resp.status_code == 404


async def test_lock_requires_admin(
    async_client: AsyncClient,
    override_settings: Callable[..., Settings],
) -> None:
    override_settings(config_edit_mode="lock")
    await create_config(async_client)
    resp = await async_client.post(f"{CONFIGS_URL}/{YEAR}/lock", headers=MANAGER_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Working-day counts
# ---------------------------------------------------------------------------


async def test_working_days_endpoint(async_client: AsyncClient) -> None:
    await create_config(async_client, holidays=[{"date": "2025-03-12", "name": "Founders Day"}])
    resp = await async_client.get(
        f"{CONFIGS_URL}/{YEAR}/working-days",
        params={"from_date": "2025-03-10", "to_date": "2025-03-16"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json() == {"year": YEAR, "from_date": "2025-03-10", "to_date": "2025-03-16", "working_days": 4}


async def test_working_days_follow_updated_rule(async_client: AsyncClient) -> None:
    await create_config(async_client)
    await async_client.patch(f"{CONFIGS_URL}/{YEAR}", json={"working_days_per_week": 6}, headers=ADMIN_HEADERS)
    resp = await async_client.get(
        f"{CONFIGS_URL}/{YEAR}/working-days",
        params={"from_date": "2025-03-10", "to_date": "2025-03-16"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.json()["working_days"] == 6


async def test_working_days_reversed_range(async_client: AsyncClient) -> None:
    await create_config(async_client)
    resp = await async_client.get(
        f"{CONFIGS_URL}/{YEAR}/working-days",
        params={"from_date": "2025-03-16", "to_date": "2025-03-10"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 400


async def test_working_days_unconfigured_year(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        f"{CONFIGS_URL}/{YEAR}/working-days",
        params={"from_date": "2025-03-10", "to_date": "2025-03-16"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 404
