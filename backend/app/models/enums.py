from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Role of an authenticated actor."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests.

    Cancellation removes a PENDING request instead of moving it to a state.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveDecision(enum.StrEnum):
    """Outcome an approver can choose for a pending request."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    YEAR_CONFIG = "YEAR_CONFIG"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    LOCK = "LOCK"
    APPLY = "APPLY"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
