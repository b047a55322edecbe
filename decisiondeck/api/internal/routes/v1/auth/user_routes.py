# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.core.exceptions import AuthorizationError
from decisiondeck.dependancies.common import PageParams, get_current_admin, get_current_user
from decisiondeck.models.auth.user import User, UserRole
from decisiondeck.schemas.auth import UserListResponse, UserResponse, UserRoleUpdateRequest, UserStatusUpdateRequest
from decisiondeck.services.auth.user_services import list_users, require_user, set_user_active, set_user_role

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def get_users(
    paging: PageParams = Depends(),
    role: UserRole | None = None,
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None, max_length=100),
    _: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """List accounts (admin only)"""
    return await list_users(db, paging.page, paging.limit, role=role, is_active=is_active, search=search)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Get an account (admin only or self)"""
    if user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("You can only view your own account")
    return await require_user(db, user_id)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    data: UserRoleUpdateRequest,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await set_user_role(db, current_admin, user_id, data.role)


@router.put("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: UUID,
    data: UserStatusUpdateRequest,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """Activate or deactivate an account"""
    return await set_user_active(db, current_admin, user_id, data.is_active)


@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(
    user_id: UUID,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """Soft-delete: the account is deactivated, its votes are kept"""
    return await set_user_active(db, current_admin, user_id, False)
