from __future__ import annotations

import uuid
from datetime import date

from app.models import (
    AuditLog,
    ConfigHoliday,
    LeaveApplyGuard,
    LeaveRequest,
    SQLModel,
    YearConfig,
)
from app.models.enums import LeaveStatus

EXPECTED_TABLES = {
    "audit_log",
    "config_holiday",
    "leave_apply_guard",
    "leave_request",
    "year_config",
}


def test_all_tables_registered() -> None:
    assert EXPECTED_TABLES.issubset(set(SQLModel.metadata.tables.keys()))


def test_year_config_defaults() -> None:
    config = YearConfig(year=2025, working_days_per_week=5, created_by=uuid.uuid4())
    assert config.id is not None
    assert config.is_locked is False
    assert config.leave_types_json == {}
    assert config.updated_by is None


def test_config_holiday_instantiation() -> None:
    holiday = ConfigHoliday(config_id=uuid.uuid4(), date=date(2025, 12, 25), name="Christmas")
    assert holiday.date == date(2025, 12, 25)


def test_leave_request_defaults() -> None:
    leave = LeaveRequest(
        requested_by=uuid.uuid4(),
        from_date=date(2025, 3, 10),
        to_date=date(2025, 3, 12),
        leave_type="casual",
        reason="Trip",
        working_days=3,
    )
    assert leave.status == LeaveStatus.PENDING
    assert leave.approver_id is None
    assert leave.decided_at is None


def test_apply_guard_composite_key() -> None:
    table = SQLModel.metadata.tables["leave_apply_guard"]
    assert [c.name for c in table.primary_key.columns] == ["user_id", "year"]
    assert LeaveApplyGuard(user_id=uuid.uuid4(), year=2025).version == 1


def test_audit_log_instantiation() -> None:
    entry = AuditLog(actor_id=uuid.uuid4(), entity_type="LEAVE_REQUEST", entity_id="x", action="APPLY")
    assert entry.before_json is None
    assert entry.created_at is not None
