from sqlmodel import SQLModel

from app.models.audit import AuditLog
from app.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase
from app.models.config import ConfigHoliday, YearConfig
from app.models.enums import (
    AuditAction,
    AuditEntityType,
    LeaveDecision,
    LeaveStatus,
    Role,
)
from app.models.guard import LeaveApplyGuard
from app.models.leave import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "ConfigHoliday",
    "LeaveApplyGuard",
    "LeaveDecision",
    "LeaveRequest",
    "LeaveStatus",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdateTimestampMixin",
    "YearConfig",
]
