# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from app.api.deps import AdminDep, AuthDep
from app.exceptions import NotFoundError
from app.schemas.user import UpsertUserRequest, UserListResponse, UserResponse
from app.services.directory import UserInfo, get_user_directory

users_router = APIRouter(
    prefix="/users",
    tags=["users"],
)


def _to_response(user: UserInfo) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        manager_id=user.manager_id,
    )


@users_router.put("/{user_id}", response_model=UserResponse)
async def upsert_user(
    user_id: uuid.UUID,
    payload: UpsertUserRequest,
    auth: AdminDep,
) -> UserResponse:
    """Create or replace a directory user (admin only)."""
    user = UserInfo(id=user_id, **payload.model_dump())
    return _to_response(await get_user_directory().upsert_user(user))


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    auth: AuthDep,
) -> UserResponse:
    """Get a directory user."""
    user = await get_user_directory().get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return _to_response(user)


@users_router.get("/{user_id}/reportees", response_model=UserListResponse)
async def list_reportees(
    user_id: uuid.UUID,
    auth: AuthDep,
) -> UserListResponse:
    """List the users who report to a manager."""
    directory = get_user_directory()
    if await directory.get_user(user_id) is None:
        raise NotFoundError("User not found")
    reportees = await directory.list_reportees(user_id)
    return UserListResponse(items=[_to_response(u) for u in reportees], total=len(reportees))


@users_router.delete("/{user_id}", response_model=UserResponse)
async def remove_user(
    user_id: uuid.UUID,
    auth: AdminDep,
) -> UserResponse:
    """Remove a directory user and detach their reportees (admin only)."""
    return _to_response(await get_user_directory().remove_user(user_id))
