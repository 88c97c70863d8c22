# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from app.models.enums import Role


class UpsertUserRequest(BaseModel):
    """Request body for creating or updating a directory user."""

    name: str = Field(min_length=2, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.EMPLOYEE
    manager_id: uuid.UUID | None = None


class UserResponse(BaseModel):
    """Response schema for a directory user."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    manager_id: uuid.UUID | None


class UserListResponse(BaseModel):
    """List of directory users."""

    items: list[UserResponse]
    total: int
