# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from app.exceptions import NotFoundError, ValidationError
from app.models.enums import Role

logger = logging.getLogger(__name__)


class UserInfo(BaseModel):
    """User identity, role and manager link from the user directory."""

    id: uuid.UUID
    name: str
    email: str
    role: Role = Role.EMPLOYEE
    manager_id: uuid.UUID | None = None


@runtime_checkable
class UserDirectory(Protocol):
    """Interface for the user directory."""

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        """Fetch a user. Returns None if not found."""
        ...

    async def list_reportees(self, manager_id: uuid.UUID) -> list[UserInfo]:
        """List users whose manager is manager_id."""
        ...

    async def list_admins(self) -> list[UserInfo]:
        """List users holding the admin role."""
        ...

    async def upsert_user(self, user: UserInfo) -> UserInfo:
        """Create or replace a user, enforcing manager-link rules."""
        ...

    async def remove_user(self, user_id: uuid.UUID) -> UserInfo:
        """Remove a user and detach their reportees."""
        ...


class InMemoryUserDirectory:
    """In-memory stub implementation for development and tests.

    The manager link is a single optional back-reference; reportees are the
    reverse lookup over it. Demoting a manager to employee, or removing them,
    detaches every reportee.
    """

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, UserInfo] = {}

    def seed(self, user: UserInfo) -> None:
        """Seed a user without validation, for testing."""
        self._users[user.id] = user

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        return self._users.get(user_id)

    async def list_reportees(self, manager_id: uuid.UUID) -> list[UserInfo]:
        return [u for u in self._users.values() if u.manager_id == manager_id]

    async def list_admins(self) -> list[UserInfo]:
        return [u for u in self._users.values() if u.role == Role.ADMIN]

    async def upsert_user(self, user: UserInfo) -> UserInfo:
        if user.manager_id is not None:
            if user.manager_id == user.id:
                raise ValidationError("User cannot be their own manager")
            manager = self._users.get(user.manager_id)
            if manager is None or manager.role != Role.MANAGER:
                raise ValidationError(f"Invalid manager assignment: {user.manager_id} is not a manager")

        existing = self._users.get(user.id)
        if existing is not None and existing.role == Role.MANAGER and user.role != Role.MANAGER:
            self._detach_reportees(user.id)

        self._users[user.id] = user
        return user

    async def remove_user(self, user_id: uuid.UUID) -> UserInfo:
        user = self._users.pop(user_id, None)
        if user is None:
            raise NotFoundError("User not found")
        self._detach_reportees(user_id)
        return user

    def _detach_reportees(self, manager_id: uuid.UUID) -> None:
        detached = 0
        for reportee in list(self._users.values()):
            if reportee.manager_id == manager_id:
                self._users[reportee.id] = reportee.model_copy(update={"manager_id": None})
                detached += 1
        if detached:
            logger.info("Detached %d reportee(s) from manager %s", detached, manager_id)


_user_directory: UserDirectory = InMemoryUserDirectory()


def get_user_directory() -> UserDirectory:
    """FastAPI dependency for the user directory."""
    return _user_directory


def set_user_directory(directory: UserDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _user_directory
    _user_directory = directory
