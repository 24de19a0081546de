"""Authentication dependencies: get_current_user, get_optional_user, require_role."""

from __future__ import annotations

import hashlib
import uuid
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import AuthError, decode_token
from app.auth.models import User
from app.database import get_db
from app.models.enums import UserRoleEnum

bearer_scheme = HTTPBearer(auto_error=False)


def _raise_auth(exc: AuthError) -> HTTPException:
	return HTTPException(
		status_code=exc.status_code,
		detail={"error": exc.code, "message": exc.detail},
	)


def extract_client_identity(request: Request) -> str:
	"""Stable per-client key for rate limiting: token digest, else client address."""
	auth_header = request.headers.get("authorization", "")
	if auth_header.lower().startswith("bearer "):
		digest = hashlib.sha256(auth_header[7:].strip().encode("utf-8")).hexdigest()
		return f"token:{digest[:32]}"
	host = request.client.host if request.client is not None else "unknown"
	return f"ip:{host}"


async def _resolve_user_from_token(
	db: AsyncSession,
	credentials: HTTPAuthorizationCredentials | None,
) -> User:
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise _raise_auth(AuthError(code="auth_required", detail="Bearer token is required"))

	try:
		payload = decode_token(credentials.credentials)
	except AuthError as exc:
		raise _raise_auth(exc) from exc
	try:
		user_id = uuid.UUID(str(payload["sub"]))
	except (ValueError, KeyError) as exc:
		raise _raise_auth(AuthError(code="token_invalid", detail="Token subject is invalid")) from exc

	row = await db.execute(select(User).where(User.id == user_id))
	user = row.scalar_one_or_none()
	if user is None:
		raise _raise_auth(AuthError(code="user_invalid", detail="User not found"))
	if not user.is_active:
		raise _raise_auth(AuthError(code="user_inactive", detail="Account is deactivated"))
	return user


async def get_current_user(
	request: Request,
	db: AsyncSession = Depends(get_db),
) -> User:
	credentials = await bearer_scheme(request)
	return await _resolve_user_from_token(db, credentials)


async def get_optional_user(
	request: Request,
	db: AsyncSession = Depends(get_db),
) -> User | None:
	"""Like ``get_current_user`` but anonymous or invalid credentials yield ``None``."""
	credentials = await bearer_scheme(request)
	if credentials is None:
		return None
	try:
		return await _resolve_user_from_token(db, credentials)
	except HTTPException:
		return None


def require_role(*allowed: UserRoleEnum) -> Callable[[User], User]:
	allowed_set = set(allowed)

	async def dependency(current_user: User = Depends(get_current_user)) -> User:
		if current_user.role not in allowed_set:
			raise HTTPException(
				status_code=status.HTTP_403_FORBIDDEN,
				detail={"error": "forbidden", "message": "Insufficient role"},
			)
		return current_user

	return dependency
