from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.auth.dependencies import get_current_user
from app.auth.jwt import AuthError, decode_token
from app.main import app
from app.models.enums import ExperienceEnum, FarmSizeEnum, UserRoleEnum
from app.schemas.users import PasswordChange, ProfileUpdate, UserLogin, UserRegister
from app.services import user_service as user_service_module
from app.services.user_service import UserService
from conftest import FakeAsyncSession, FakeResult, make_user


@pytest.fixture
def cheap_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setattr(user_service_module, "hash_password", lambda plain: f"hashed:{plain}")
	monkeypatch.setattr(
		user_service_module,
		"verify_password",
		lambda plain, hashed: hashed == f"hashed:{plain}",
	)


# ── Endpoints ───────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_returns_profile_and_token(auth_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
	user = make_user()

	async def fake_register(self: UserService, payload: UserRegister) -> tuple[object, str]:
		assert payload.email == "grower@farmmail.com"
		return user, "signed-token"

	monkeypatch.setattr(UserService, "register", fake_register)

	response = await auth_client.post(
		"/api/v1/users/register",
		json={"name": "Asha", "email": "Grower@FarmMail.com", "password": "harvest42"},
	)

	assert response.status_code == 201
	body = response.json()
	assert body["token"] == "signed-token"
	assert body["user"]["id"] == str(user.id)
	assert "hashed_password" not in body["user"]


@pytest.mark.asyncio
async def test_register_rejects_bad_email(auth_client: AsyncClient) -> None:
	response = await auth_client.post(
		"/api/v1/users/register",
		json={"name": "Asha", "email": "not-an-email", "password": "harvest42"},
	)
	assert response.status_code == 400
	assert response.json()["detail"]["error"] == "validation_failed"


@pytest.mark.asyncio
async def test_register_cannot_claim_admin_role(auth_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
	async def fake_register(self: UserService, _payload: UserRegister) -> tuple[object, str]:
		raise AssertionError("service must not be reached")

	monkeypatch.setattr(UserService, "register", fake_register)

	response = await auth_client.post(
		"/api/v1/users/register",
		json={"name": "Asha", "email": "grower@farmmail.com", "password": "harvest42", "role": "admin"},
	)

	assert response.status_code == 400
	assert response.json()["detail"]["error"] == "validation_failed"


def test_register_allows_analyst_role() -> None:
	payload = UserRegister(name="Ravi", email="ravi@farmmail.com", password="harvest42", role=UserRoleEnum.analyst)
	assert payload.role == UserRoleEnum.analyst


@pytest.mark.asyncio
async def test_register_duplicate_email_maps_to_400(auth_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
	async def fake_register(self: UserService, _payload: UserRegister) -> tuple[object, str]:
		raise ValueError("User with this email already exists")

	monkeypatch.setattr(UserService, "register", fake_register)

	response = await auth_client.post(
		"/api/v1/users/register",
		json={"name": "Asha", "email": "grower@farmmail.com", "password": "harvest42"},
	)

	assert response.status_code == 400
	assert response.json()["detail"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_login_failure_maps_to_401(auth_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
	async def fake_authenticate(self: UserService, _payload: UserLogin) -> tuple[object, str]:
		raise AuthError(code="invalid_credentials", detail="Invalid email or password")

	monkeypatch.setattr(UserService, "authenticate", fake_authenticate)

	response = await auth_client.post(
		"/api/v1/users/login",
		json={"email": "grower@farmmail.com", "password": "wrong1"},
	)

	assert response.status_code == 401
	assert response.json()["detail"]["error"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, current_user: SimpleNamespace) -> None:
	response = await client.get("/api/v1/users/profile")
	assert response.status_code == 200
	body = response.json()
	assert body["email"] == current_user.email
	assert body["role"] == "farmer"


@pytest.mark.asyncio
async def test_change_password_wrong_current_maps_to_400(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
	async def fake_change(self: UserService, _user: object, _payload: PasswordChange) -> None:
		raise ValueError("Current password is incorrect")

	monkeypatch.setattr(UserService, "change_password", fake_change)

	response = await client.put(
		"/api/v1/users/change-password",
		json={"current_password": "oldpass1", "new_password": "newpass2"},
	)

	assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_routes_reject_farmers(client: AsyncClient) -> None:
	response = await client.put(f"/api/v1/users/{uuid4()}/status", json={"is_active": False})
	assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_lists_users(
	client: AsyncClient,
	admin_user: SimpleNamespace,
	fake_db_session: FakeAsyncSession,
) -> None:
	async def _admin() -> object:
		return admin_user

	app.dependency_overrides[get_current_user] = _admin
	fake_db_session.scalar.return_value = 12
	fake_db_session.execute.return_value = FakeResult([admin_user, make_user()])

	response = await client.get("/api/v1/users", params={"page": 2, "limit": 10})

	assert response.status_code == 200
	body = response.json()
	assert len(body["items"]) == 2
	assert body["pagination"] == {"current": 2, "pages": 2, "total": 12}


@pytest.mark.asyncio
async def test_admin_get_missing_user_maps_to_404(
	client: AsyncClient,
	admin_user: SimpleNamespace,
	fake_db_session: FakeAsyncSession,
) -> None:
	async def _admin() -> object:
		return admin_user

	app.dependency_overrides[get_current_user] = _admin
	fake_db_session.execute.return_value = FakeResult([])

	response = await client.get(f"/api/v1/users/{uuid4()}")

	assert response.status_code == 404


# ── Service ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_hashes_password_and_issues_token(cheap_hashing: None) -> None:
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([])

	async def _refresh(user: object) -> None:
		user.id = uuid4()  # type: ignore[attr-defined]

	db.refresh.side_effect = _refresh

	user, token = await UserService(db).register(  # type: ignore[arg-type]
		UserRegister(name="Asha", email="grower@farmmail.com", password="harvest42")
	)

	assert user.hashed_password == "hashed:harvest42"
	assert user.farm_size == FarmSizeEnum.small
	assert user.experience == ExperienceEnum.beginner
	assert user.role == UserRoleEnum.farmer
	assert user.last_login_at is not None
	assert decode_token(token)["sub"] == str(user.id)


@pytest.mark.asyncio
async def test_register_duplicate_email_raises() -> None:
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([make_user()])

	with pytest.raises(ValueError, match="already exists"):
		await UserService(db).register(  # type: ignore[arg-type]
			UserRegister(name="Asha", email="grower@farmmail.com", password="harvest42")
		)
	db.add.assert_not_called()


@pytest.mark.asyncio
async def test_register_weak_password_raises() -> None:
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([])

	with pytest.raises(ValueError, match="at least one number"):
		await UserService(db).register(  # type: ignore[arg-type]
			UserRegister(name="Asha", email="grower@farmmail.com", password="harvesting")
		)


@pytest.mark.asyncio
async def test_authenticate_updates_last_login(cheap_hashing: None) -> None:
	user = make_user(hashed_password="hashed:harvest42")
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([user])

	result, token = await UserService(db).authenticate(  # type: ignore[arg-type]
		UserLogin(email="grower@farmmail.com", password="harvest42")
	)

	assert result is user
	assert user.last_login_at is not None
	assert token


@pytest.mark.asyncio
@pytest.mark.parametrize(
	("stored", "password", "expected_code"),
	[
		(None, "harvest42", "invalid_credentials"),
		(make_user(hashed_password="hashed:harvest42", is_active=False), "harvest42", "user_inactive"),
		(make_user(hashed_password="hashed:harvest42"), "harvest99", "invalid_credentials"),
	],
)
async def test_authenticate_failures(
	cheap_hashing: None,
	stored: object,
	password: str,
	expected_code: str,
) -> None:
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([stored] if stored is not None else [])

	with pytest.raises(AuthError) as exc_info:
		await UserService(db).authenticate(  # type: ignore[arg-type]
			UserLogin(email="grower@farmmail.com", password=password)
		)
	assert exc_info.value.code == expected_code


@pytest.mark.asyncio
async def test_change_password(cheap_hashing: None) -> None:
	user = make_user(hashed_password="hashed:harvest42")
	service = UserService(FakeAsyncSession())  # type: ignore[arg-type]

	with pytest.raises(ValueError, match="Current password is incorrect"):
		await service.change_password(user, PasswordChange(current_password="nope", new_password="fresh99"))

	await service.change_password(user, PasswordChange(current_password="harvest42", new_password="fresh99"))
	assert user.hashed_password == "hashed:fresh99"


@pytest.mark.asyncio
async def test_update_profile_only_touches_given_fields() -> None:
	user = make_user()
	service = UserService(FakeAsyncSession())  # type: ignore[arg-type]

	await service.update_profile(user, ProfileUpdate(location="Nashik", experience=ExperienceEnum.expert))

	assert user.location == "Nashik"
	assert user.experience == ExperienceEnum.expert
	assert user.name == "Test Farmer"


@pytest.mark.asyncio
async def test_set_status_deactivates_user() -> None:
	user = make_user()
	db = FakeAsyncSession()
	db.execute.return_value = FakeResult([user])

	result = await UserService(db).set_status(user.id, False)  # type: ignore[arg-type]

	assert result.is_active is False
