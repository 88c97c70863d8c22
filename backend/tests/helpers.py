"""Identities, headers and request helpers shared by the test modules."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from httpx import AsyncClient

ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-00000000a001")
ADMIN2_ID = uuid.UUID("00000000-0000-0000-0000-00000000a002")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-00000000b001")
MANAGER2_ID = uuid.UUID("00000000-0000-0000-0000-00000000b002")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-00000000c001")
EMPLOYEE2_ID = uuid.UUID("00000000-0000-0000-0000-00000000c002")
ORPHAN_ID = uuid.UUID("00000000-0000-0000-0000-00000000c003")

CONFIGS_URL = "/configs"
LEAVES_URL = "/leave-requests"

YEAR = 2025


def headers(user_id: uuid.UUID, role: str) -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-Role": role}


ADMIN_HEADERS = headers(ADMIN_ID, "admin")
ADMIN2_HEADERS = headers(ADMIN2_ID, "admin")
MANAGER_HEADERS = headers(MANAGER_ID, "manager")
MANAGER2_HEADERS = headers(MANAGER2_ID, "manager")
EMPLOYEE_HEADERS = headers(EMPLOYEE_ID, "employee")
EMPLOYEE2_HEADERS = headers(EMPLOYEE2_ID, "employee")
ORPHAN_HEADERS = headers(ORPHAN_ID, "employee")


async def create_config(
    client: AsyncClient,
    *,
    year: int = YEAR,
    working_days_per_week: int = 5,
    holidays: list[dict[str, str]] | None = None,
    leave_types: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Create a yearly configuration as admin and return the response body."""
    resp = await client.post(
        CONFIGS_URL,
        json={
            "year": year,
            "working_days_per_week": working_days_per_week,
            "holidays": holidays or [],
            "leave_types": leave_types if leave_types is not None else {"casual": 12, "sick": 8},
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


async def apply_leave(
    client: AsyncClient,
    from_date: str,
    to_date: str,
    *,
    leave_type: str = "casual",
    auth_headers: dict[str, str] | None = None,
    reason: str = "Family event",
) -> Any:
    """Apply for leave and return the raw response."""
    return await client.post(
        LEAVES_URL,
        json={"from_date": from_date, "to_date": to_date, "leave_type": leave_type, "reason": reason},
        headers=auth_headers or EMPLOYEE_HEADERS,
    )


async def remaining(client: AsyncClient, user_id: uuid.UUID, leave_type: str = "casual", year: int = YEAR) -> int:
    resp = await client.get(f"/users/{user_id}/balances/{leave_type}", params={"year": year}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200, resp.text
    value: int = resp.json()["remaining"]
    return value
