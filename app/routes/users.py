"""User account routes: registration, login, profile and admin management."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user, require_role
from app.auth.jwt import AuthError
from app.auth.models import User
from app.database import get_db
from app.models.enums import UserRoleEnum
from app.schemas.common import MessageResponse, PageQuery, Pagination
from app.schemas.users import (
	AuthResponse,
	PasswordChange,
	ProfileUpdate,
	UserListRead,
	UserLogin,
	UserProfile,
	UserRegister,
	UserStatusUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])

_admin_only = require_role(UserRoleEnum.admin)


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, AuthError):
		return HTTPException(
			status_code=exc.status_code,
			detail={"error": exc.code, "message": exc.detail},
		)
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, PermissionError):
		return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="user service failure")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, db: AsyncSession = Depends(get_db)) -> AuthResponse:
	service = UserService(db)
	try:
		user, token = await service.register(payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AuthResponse(user=UserProfile.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)) -> AuthResponse:
	service = UserService(db)
	try:
		user, token = await service.authenticate(payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AuthResponse(user=UserProfile.model_validate(user), token=token)


@router.get("/profile", response_model=UserProfile)
async def get_profile(user: User = Depends(get_current_user)) -> UserProfile:
	return UserProfile.model_validate(user)


@router.put("/profile", response_model=UserProfile)
async def update_profile(
	payload: ProfileUpdate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> UserProfile:
	service = UserService(db)
	try:
		updated = await service.update_profile(user, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return UserProfile.model_validate(updated)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
	payload: PasswordChange,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> MessageResponse:
	service = UserService(db)
	try:
		await service.change_password(user, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return MessageResponse(message="Password changed successfully")


# ── Admin ───────────────────────────────────────────────────────────────────


@router.get("", response_model=UserListRead)
async def list_users(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=10, ge=1, le=100),
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_admin_only),
) -> UserListRead:
	service = UserService(db)
	page_query = PageQuery(page=page, limit=limit)
	try:
		users, total = await service.list_users(page_query)
	except Exception as exc:
		raise _map_error(exc) from exc
	return UserListRead(
		items=[UserProfile.model_validate(item) for item in users],
		pagination=Pagination.build(page_query, total),
	)


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
	user_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_admin_only),
) -> UserProfile:
	service = UserService(db)
	try:
		return UserProfile.model_validate(await service.get_user(user_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.put("/{user_id}/status", response_model=UserProfile)
async def update_user_status(
	user_id: uuid.UUID,
	payload: UserStatusUpdate,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_admin_only),
) -> UserProfile:
	service = UserService(db)
	try:
		return UserProfile.model_validate(await service.set_status(user_id, payload.is_active))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
	user_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_admin_only),
) -> MessageResponse:
	service = UserService(db)
	try:
		await service.delete_user(user_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return MessageResponse(message="User deleted successfully")
