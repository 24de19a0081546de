"""Shared pytest fixtures: async test client, fake DB session and Redis doubles."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.auth.dependencies import get_current_user, get_optional_user
from app.auth.jwt import create_access_token
from app.database import get_db
from app.main import app
from app.models.enums import ExperienceEnum, FarmSizeEnum, UserRoleEnum


class FakeAsyncSession:
	def __init__(self) -> None:
		self.commit = AsyncMock()
		self.rollback = AsyncMock()
		self.close = AsyncMock()
		self.execute = AsyncMock()
		self.scalar = AsyncMock(return_value=None)
		self.flush = AsyncMock()
		self.refresh = AsyncMock()
		self.delete = AsyncMock()
		self.add = MagicMock()


class FakeRedis:
	def __init__(self) -> None:
		self.store: dict[str, str] = {}
		self.setex = AsyncMock(side_effect=self._setex)
		self.get = AsyncMock(side_effect=self._get)
		self.delete = AsyncMock(side_effect=self._delete)
		self.ping = AsyncMock(return_value=True)
		self._counter: dict[str, int] = {}
		self.incr = AsyncMock(side_effect=self._incr)
		self.expire = AsyncMock(return_value=True)

	async def _setex(self, key: str, _ttl: int, value: str) -> bool:
		self.store[key] = value
		return True

	async def _get(self, key: str) -> str | None:
		return self.store.get(key)

	async def _delete(self, key: str) -> int:
		return 1 if self.store.pop(key, None) is not None else 0

	async def _incr(self, key: str) -> int:
		value = self._counter.get(key, 0) + 1
		self._counter[key] = value
		return value

	def reset_counters(self) -> None:
		self._counter.clear()


class FakeResult:
	"""Stands in for ``Result`` in service-level tests."""

	def __init__(self, items: list[Any]) -> None:
		self._items = items

	def scalar_one_or_none(self) -> Any:
		return self._items[0] if self._items else None

	def scalars(self) -> "FakeResult":
		return self

	def all(self) -> list[Any]:
		return list(self._items)


def make_user(
	role: UserRoleEnum = UserRoleEnum.farmer,
	*,
	user_id: uuid.UUID | None = None,
	is_active: bool = True,
	hashed_password: str = "",
) -> SimpleNamespace:
	now = datetime.now(UTC)
	return SimpleNamespace(
		id=user_id or uuid.uuid4(),
		name="Test Farmer",
		email=f"{role.value}@test.local",
		hashed_password=hashed_password,
		role=role,
		is_admin=role == UserRoleEnum.admin,
		farm_size=FarmSizeEnum.small,
		experience=ExperienceEnum.beginner,
		location="Pune",
		phone=None,
		is_active=is_active,
		last_login_at=None,
		created_at=now,
		updated_at=now,
	)


@pytest.fixture
def user_factory() -> Callable[..., SimpleNamespace]:
	return make_user


@pytest.fixture
def fake_db_session() -> FakeAsyncSession:
	"""A lightweight async-session stub for dependency overrides in API tests."""
	return FakeAsyncSession()


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


@pytest.fixture
def current_user() -> SimpleNamespace:
	return make_user(UserRoleEnum.farmer)


@pytest.fixture
def admin_user() -> SimpleNamespace:
	return make_user(UserRoleEnum.admin)


@asynccontextmanager
async def _client_for_app() -> AsyncGenerator[AsyncClient, None]:
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan
	app.state.redis = None

	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://test") as test_client:
			yield test_client
	finally:
		app.router.lifespan_context = original_lifespan
		app.dependency_overrides.clear()
		app.state.redis = None


@pytest.fixture
async def client(
	fake_db_session: FakeAsyncSession,
	current_user: SimpleNamespace,
) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled, DB mocked and a signed-in farmer."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	async def override_current_user() -> Any:
		return current_user

	app.dependency_overrides[get_db] = override_get_db
	app.dependency_overrides[get_current_user] = override_current_user
	app.dependency_overrides[get_optional_user] = override_current_user

	async with _client_for_app() as test_client:
		yield test_client


@pytest.fixture
async def auth_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with DB override only (real auth dependencies active)."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	app.dependency_overrides[get_db] = override_get_db

	async with _client_for_app() as test_client:
		yield test_client


@pytest.fixture
def auth_user_id() -> uuid.UUID:
	return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def access_token(auth_user_id: uuid.UUID) -> str:
	return create_access_token(str(auth_user_id), expires_minutes=30)


@pytest.fixture
def now_utc() -> datetime:
	return datetime.now(UTC)
