"""User account service: registration, login, profile and admin management."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import AuthError, create_access_token
from app.auth.models import User
from app.auth.passwords import hash_password, validate_password_strength, verify_password
from app.models.enums import ExperienceEnum, FarmSizeEnum
from app.schemas.common import PageQuery
from app.schemas.users import PasswordChange, ProfileUpdate, UserLogin, UserRegister


class UserService:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def register(self, payload: UserRegister) -> tuple[User, str]:
		if await self._find_by_email(payload.email) is not None:
			raise ValueError("User with this email already exists")
		validate_password_strength(payload.password)

		user = User(
			name=payload.name,
			email=payload.email,
			hashed_password=hash_password(payload.password),
			role=payload.role,
			farm_size=payload.farm_size or FarmSizeEnum.small,
			experience=payload.experience or ExperienceEnum.beginner,
			location=payload.location,
			phone=payload.phone,
			is_active=True,
			last_login_at=datetime.now(UTC),
		)
		self.db.add(user)
		await self.db.flush()
		await self.db.refresh(user)
		return user, create_access_token(str(user.id))

	async def authenticate(self, payload: UserLogin) -> tuple[User, str]:
		user = await self._find_by_email(payload.email)
		if user is None:
			raise AuthError(code="invalid_credentials", detail="Invalid email or password")
		if not user.is_active:
			raise AuthError(
				code="user_inactive",
				detail="Account is deactivated. Please contact support.",
			)
		if not verify_password(payload.password, user.hashed_password):
			raise AuthError(code="invalid_credentials", detail="Invalid email or password")

		user.last_login_at = datetime.now(UTC)
		await self.db.flush()
		return user, create_access_token(str(user.id))

	async def update_profile(self, user: User, payload: ProfileUpdate) -> User:
		for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
			setattr(user, field, value)
		await self.db.flush()
		return user

	async def change_password(self, user: User, payload: PasswordChange) -> None:
		if not verify_password(payload.current_password, user.hashed_password):
			raise ValueError("Current password is incorrect")
		validate_password_strength(payload.new_password)
		user.hashed_password = hash_password(payload.new_password)
		await self.db.flush()

	async def list_users(self, query: PageQuery) -> tuple[list[User], int]:
		total = await self.db.scalar(select(func.count()).select_from(User))
		rows = await self.db.execute(
			select(User).order_by(User.created_at.desc()).offset(query.offset).limit(query.limit)
		)
		return list(rows.scalars().all()), int(total or 0)

	async def get_user(self, user_id: uuid.UUID) -> User:
		row = await self.db.execute(select(User).where(User.id == user_id))
		user = row.scalar_one_or_none()
		if user is None:
			raise LookupError("User not found")
		return user

	async def set_status(self, user_id: uuid.UUID, is_active: bool) -> User:
		user = await self.get_user(user_id)
		user.is_active = is_active
		await self.db.flush()
		return user

	async def delete_user(self, user_id: uuid.UUID) -> None:
		user = await self.get_user(user_id)
		await self.db.delete(user)
		await self.db.flush()

	async def _find_by_email(self, email: str) -> User | None:
		row = await self.db.execute(select(User).where(User.email == email.lower()))
		return row.scalar_one_or_none()
