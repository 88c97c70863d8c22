"""Simulated email delivery. Messages are written to the log, nothing is sent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.schemas.leave import LeaveResponse
    from app.services.directory import UserInfo

logger = logging.getLogger(__name__)

_ADMIN_RECIPIENT = "admin"


def notify_leave_applied(requester: UserInfo, approver: UserInfo | None, leave: LeaveResponse) -> None:
    recipient = approver.email if approver is not None else _ADMIN_RECIPIENT
    logger.info(
        "Email to %s: %s leave request from %s (%s to %s, %d working days)",
        recipient,
        leave.leave_type,
        requester.name,
        leave.from_date,
        leave.to_date,
        leave.working_days,
    )


def notify_leave_decided(requester: UserInfo | None, leave: LeaveResponse) -> None:
    recipient = requester.email if requester is not None else str(leave.requested_by)
    logger.info(
        "Email to %s: Your leave from %s to %s has been %s",
        recipient,
        leave.from_date,
        leave.to_date,
        leave.status.lower(),
    )


def notify_leave_cancelled(requester: UserInfo | None, leave: LeaveResponse) -> None:
    recipient = requester.email if requester is not None else str(leave.requested_by)
    logger.info(
        "Email to %s: Your leave request from %s to %s has been cancelled",
        recipient,
        leave.from_date,
        leave.to_date,
    )


def notify_config_changed(year: int, change: str) -> None:
    logger.info("Email to %s: Leave configuration for %d has been %s", _ADMIN_RECIPIENT, year, change)
