"""인증 테스트 — 토큰 방식, 사용자 서비스, 인증 엔드포인트.

Auth tests — Both token schemes, the user service, and the /dummyLogin,
/register and /login endpoints.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import AsyncClient

from app.config import Settings, settings
from app.database import ConnectionProvider
from app.models.user import UserRole
from app.services.auth_service import (
    AuthenticatedUser,
    InvalidTokenFormatError,
    JWTAuthenticator,
    PlainTokenAuthenticator,
    build_authenticator,
)
from app.services.user_service import (
    CreateUserError,
    FindTokenError,
    InvalidPasswordError,
    InvalidTokenError,
    UserService,
)
from app.utils.exceptions import ValidationError
from app.utils.jwt import issue_access_token
from tests.conftest import auth_header

USER_ID = uuid.UUID("0b6f3c1e-8a2d-4f57-b9e4-6c7d8e9f0a1b")


# ===== Token schemes =====

class TestPlainTokenAuthenticator:
    """"<userID>:<role>" 토큰 테스트."""

    def setup_method(self):
        self.auth = PlainTokenAuthenticator(rounds=4)

    def test_issue_is_pure_function_of_user_and_role(self):
        assert self.auth.issue_token(USER_ID, UserRole.MODERATOR) == f"{USER_ID}:moderator"
        assert self.auth.issue_token(USER_ID, UserRole.MODERATOR) == self.auth.issue_token(
            USER_ID, UserRole.MODERATOR
        )

    def test_round_trip(self):
        token = self.auth.issue_token(USER_ID, UserRole.EMPLOYEE)
        assert self.auth.authenticate(token) == AuthenticatedUser(user_id=USER_ID, role=UserRole.EMPLOYEE)

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "garbage",
            f"{USER_ID}",
            f"{USER_ID}:employee:extra",
            "not-a-uuid:employee",
            f"{USER_ID}:admin",
        ],
    )
    def test_rejects_malformed(self, token):
        with pytest.raises(InvalidTokenFormatError) as exc_info:
            self.auth.authenticate(token)
        assert isinstance(exc_info.value, ValidationError)

    def test_password_hashing(self):
        password_hash = self.auth.hash_password("secret")
        assert password_hash != "secret"
        assert self.auth.compare_password("secret", password_hash)
        assert not self.auth.compare_password("wrong", password_hash)
        assert not self.auth.compare_password("secret", "not-a-bcrypt-hash")


class TestJWTAuthenticator:
    """서명된 JWT 토큰 테스트."""

    def setup_method(self):
        self.auth = JWTAuthenticator(rounds=4)

    def test_round_trip(self):
        token = self.auth.issue_token(USER_ID, UserRole.MODERATOR)
        assert self.auth.authenticate(token) == AuthenticatedUser(user_id=USER_ID, role=UserRole.MODERATOR)

    def test_rejects_tampered_token(self):
        token = self.auth.issue_token(USER_ID, UserRole.EMPLOYEE)
        with pytest.raises(InvalidTokenFormatError):
            self.auth.authenticate(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))

    def test_rejects_plain_token(self):
        with pytest.raises(InvalidTokenFormatError):
            self.auth.authenticate(f"{USER_ID}:employee")

    def test_rejects_unknown_role(self):
        token = issue_access_token(str(USER_ID), "admin")
        with pytest.raises(InvalidTokenFormatError, match="unknown role"):
            self.auth.authenticate(token)

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": str(USER_ID), "role": "employee", "type": "refresh"},
            {"sub": str(USER_ID), "type": "access"},
            {"role": "employee", "type": "access"},
        ],
    )
    def test_rejects_missing_or_wrong_claims(self, claims):
        """필수 클레임 누락 또는 유형 불일치 거부."""
        payload = {**claims, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
        token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(InvalidTokenFormatError, match="token rejected"):
            self.auth.authenticate(token)

    def test_rejects_token_without_expiry(self):
        token = jwt.encode(
            {"sub": str(USER_ID), "role": "employee", "type": "access"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(InvalidTokenFormatError):
            self.auth.authenticate(token)


class TestBuildAuthenticator:
    def test_plain_is_default(self):
        assert isinstance(build_authenticator(Settings(AUTH_TOKEN_SCHEME="plain")), PlainTokenAuthenticator)

    def test_jwt(self):
        assert isinstance(build_authenticator(Settings(AUTH_TOKEN_SCHEME="jwt")), JWTAuthenticator)


# ===== User service =====

class TestUserService:
    """사용자 서비스 테스트."""

    def _service(self, provider: ConnectionProvider) -> UserService:
        return UserService(provider, auth=PlainTokenAuthenticator(rounds=4))

    async def test_create(self, provider: ConnectionProvider):
        user = await self._service(provider).create("user@test.com", "pa55word", UserRole.MODERATOR)

        assert user.email == "user@test.com"
        assert user.role == UserRole.MODERATOR.value
        assert user.password_hash != "pa55word"
        assert user.token == f"{user.id}:moderator"

    async def test_create_duplicate_email(self, provider: ConnectionProvider):
        service = self._service(provider)
        await service.create("user@test.com", "pa55word", UserRole.EMPLOYEE)

        with pytest.raises(CreateUserError):
            await service.create("user@test.com", "other", UserRole.EMPLOYEE)

    async def test_create_unknown_role(self, provider: ConnectionProvider):
        with pytest.raises(CreateUserError, match="unknown role"):
            await self._service(provider).create("user@test.com", "pa55word", "admin")

    async def test_find_token_issues_and_stores_token(self, provider: ConnectionProvider):
        service = self._service(provider)
        user = await service.create("user@test.com", "pa55word", UserRole.EMPLOYEE)

        token = await service.find_token_by_email_and_password("user@test.com", "pa55word")
        assert token == f"{user.id}:employee"
        assert await service.login_by_token(token) == AuthenticatedUser(user.id, UserRole.EMPLOYEE)

    async def test_find_token_unknown_email(self, provider: ConnectionProvider):
        with pytest.raises(FindTokenError):
            await self._service(provider).find_token_by_email_and_password("nobody@test.com", "x")

    async def test_find_token_wrong_password(self, provider: ConnectionProvider):
        service = self._service(provider)
        await service.create("user@test.com", "pa55word", UserRole.EMPLOYEE)

        with pytest.raises(InvalidPasswordError):
            await service.find_token_by_email_and_password("user@test.com", "wrong")

    async def test_login_by_invalid_token(self, provider: ConnectionProvider):
        with pytest.raises(InvalidTokenError):
            await self._service(provider).login_by_token("garbage")


# ===== Endpoints =====

class TestDummyLogin:
    """POST /dummyLogin 테스트."""

    @pytest.mark.parametrize("role", ["employee", "moderator"])
    async def test_returns_token_for_role(self, client: AsyncClient, role):
        res = await client.post("/dummyLogin", json={"role": role})
        assert res.status_code == 200
        token = res.json()
        assert isinstance(token, str)
        assert token.endswith(f":{role}")

    async def test_each_call_creates_a_new_user(self, client: AsyncClient):
        first = (await client.post("/dummyLogin", json={"role": "employee"})).json()
        second = (await client.post("/dummyLogin", json={"role": "employee"})).json()
        assert first != second

    async def test_unknown_role(self, client: AsyncClient):
        res = await client.post("/dummyLogin", json={"role": "admin"})
        assert res.status_code == 400
        assert res.json() == {"message": "Неверный запрос"}

    async def test_token_works_for_employee_actions(self, client: AsyncClient, moderator_token):
        pvz = (await client.post("/pvz", json={"city": "Москва"}, headers=auth_header(moderator_token))).json()
        token = (await client.post("/dummyLogin", json={"role": "employee"})).json()

        res = await client.post("/receptions", json={"pvzId": pvz["id"]}, headers=auth_header(token))
        assert res.status_code == 201


class TestRegisterAndLogin:
    """POST /register, POST /login 테스트."""

    async def test_register(self, client: AsyncClient):
        res = await client.post("/register", json={
            "email": "new@test.com",
            "password": "pa55word",
            "role": "employee",
        })
        assert res.status_code == 201
        data = res.json()
        assert data["email"] == "new@test.com"
        assert data["role"] == "employee"
        uuid.UUID(data["id"])
        assert "password" not in data
        assert "token" not in data

    async def test_register_duplicate_email(self, client: AsyncClient):
        body = {"email": "dup@test.com", "password": "pa55word", "role": "moderator"}
        assert (await client.post("/register", json=body)).status_code == 201

        res = await client.post("/register", json=body)
        assert res.status_code == 400
        assert res.json() == {"message": "Неверный запрос"}

    async def test_register_missing_field(self, client: AsyncClient):
        res = await client.post("/register", json={"email": "x@test.com", "role": "employee"})
        assert res.status_code == 400

    async def test_login(self, client: AsyncClient):
        registered = (await client.post("/register", json={
            "email": "login@test.com",
            "password": "pa55word",
            "role": "moderator",
        })).json()

        res = await client.post("/login", json={"email": "login@test.com", "password": "pa55word"})
        assert res.status_code == 200
        assert res.json() == f"{registered['id']}:moderator"

    async def test_login_wrong_password(self, client: AsyncClient):
        await client.post("/register", json={
            "email": "login@test.com",
            "password": "pa55word",
            "role": "employee",
        })

        res = await client.post("/login", json={"email": "login@test.com", "password": "wrong"})
        assert res.status_code == 401
        assert res.json() == {"message": "Неверные учетные данные"}

    async def test_login_unknown_user(self, client: AsyncClient):
        res = await client.post("/login", json={"email": "nobody@test.com", "password": "x"})
        assert res.status_code == 401
