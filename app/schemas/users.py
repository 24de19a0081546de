"""Pydantic request/response schemas for user accounts."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.enums import ExperienceEnum, FarmSizeEnum, UserRoleEnum
from app.schemas.common import Pagination

PHONE_PATTERN = r"^\+?[1-9]\d{0,15}$"
SELF_REGISTER_ROLES = frozenset({UserRoleEnum.farmer, UserRoleEnum.analyst})


class UserRegister(BaseModel):
	name: str = Field(min_length=2, max_length=50)
	email: EmailStr
	password: str = Field(min_length=6, max_length=128)
	role: UserRoleEnum = UserRoleEnum.farmer
	farm_size: FarmSizeEnum | None = None
	experience: ExperienceEnum | None = None
	location: str | None = Field(default=None, max_length=100)
	phone: str | None = Field(default=None, pattern=PHONE_PATTERN)

	@field_validator("name")
	@classmethod
	def _strip_name(cls, value: str) -> str:
		value = value.strip()
		if len(value) < 2:
			raise ValueError("Name must be between 2 and 50 characters")
		return value

	@field_validator("role")
	@classmethod
	def _restrict_role(cls, value: UserRoleEnum) -> UserRoleEnum:
		# admins are promoted out of band, never self-registered
		if value not in SELF_REGISTER_ROLES:
			raise ValueError("Role must be farmer or analyst")
		return value

	@field_validator("email")
	@classmethod
	def _normalize_email(cls, value: str) -> str:
		return value.strip().lower()


class UserLogin(BaseModel):
	email: EmailStr
	password: str = Field(min_length=1)

	@field_validator("email")
	@classmethod
	def _normalize_email(cls, value: str) -> str:
		return value.strip().lower()


class ProfileUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=2, max_length=50)
	farm_size: FarmSizeEnum | None = None
	experience: ExperienceEnum | None = None
	location: str | None = Field(default=None, max_length=100)
	phone: str | None = Field(default=None, pattern=PHONE_PATTERN)


class PasswordChange(BaseModel):
	current_password: str = Field(min_length=1)
	new_password: str = Field(min_length=6, max_length=128)


class UserStatusUpdate(BaseModel):
	is_active: bool


class UserProfile(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	name: str
	email: str
	role: UserRoleEnum
	farm_size: FarmSizeEnum
	experience: ExperienceEnum
	location: str | None = None
	phone: str | None = None
	is_active: bool
	last_login_at: datetime | None = None
	created_at: datetime


class OwnerRead(BaseModel):
	"""Compact owner reference embedded in crop and report payloads."""

	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	name: str
	email: str


class AuthResponse(BaseModel):
	user: UserProfile
	token: str


class UserListRead(BaseModel):
	items: list[UserProfile]
	pagination: Pagination
