"""사용자 서비스 — 회원가입, 로그인, 토큰 인증.

User Service — Registration, credential login and token login.
Password hashing and token handling are delegated to an Authenticator.
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import ConnectionProvider
from app.models.user import User, UserRole
from app.repositories.user_repository import UserRepository, user_repository
from app.services.auth_service import AuthenticatedUser, Authenticator, authenticator
from app.utils.exceptions import AppError, ValidationError

logger = logging.getLogger(__name__)


class UserServiceError(AppError):
    message = "user service error"


class CreateUserError(UserServiceError):
    message = "user service error: create user failed"


class FindTokenError(UserServiceError):
    message = "user service error: find token failed"


class InvalidPasswordError(UserServiceError):
    message = "user service error: invalid password"


class InvalidTokenError(UserServiceError, ValidationError):
    message = "user service error: invalid token"


class UserService:
    """사용자 계정 및 로그인 처리 서비스.

    Args:
        provider: 트랜잭션 조정자 (Transaction coordinator)
        users: 사용자 레포지토리 (User repository)
        auth: 인증 기능 (Password hashing and token capability)
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        users: UserRepository = user_repository,
        auth: Authenticator = authenticator,
    ) -> None:
        self._provider = provider
        self._users = users
        self._auth = auth

    async def _read_by_email(self, email: str) -> User:
        async def _unit(db: AsyncSession) -> User:
            return await self._users.read_by_email(db, email)

        return await self._provider.execute(_unit)

    async def create(self, email: str, password: str, role: UserRole | str) -> User:
        """새 사용자를 생성합니다.

        Hash the password, issue the user's first token, insert the row and
        return it as stored.

        Raises:
            CreateUserError: 알 수 없는 역할, 중복 이메일 또는 저장 실패
                (Unknown role, duplicate email or storage failure)
        """
        try:
            role = UserRole(role)
        except ValueError as exc:
            raise CreateUserError(f"unknown role {role!r}") from exc

        user_id: uuid.UUID = uuid.uuid4()
        user = User(
            id=user_id,
            email=email,
            role=role.value,
            password_hash=self._auth.hash_password(password),
            token=self._auth.issue_token(user_id, role),
        )

        async def _insert(db: AsyncSession) -> User:
            return await self._users.create(db, user)

        try:
            await self._provider.execute_tx(_insert)
            return await self._read_by_email(email)
        except (AppError, SQLAlchemyError) as exc:
            logger.info("user create failed for %s: %s", email, exc)
            raise CreateUserError() from exc

    async def find_token_by_email_and_password(self, email: str, password: str) -> str:
        """이메일/비밀번호로 로그인하고 새 토큰을 발급합니다.

        Check the credentials, issue a fresh token and store it on the user
        row so the latest login wins.

        Raises:
            FindTokenError: 사용자 없음 또는 토큰 저장 실패
                (Unknown email or the token update failed)
            InvalidPasswordError: 비밀번호 불일치 (Password mismatch)
        """
        try:
            user: User = await self._read_by_email(email)
        except (AppError, SQLAlchemyError) as exc:
            raise FindTokenError() from exc

        if not self._auth.compare_password(password, user.password_hash):
            raise InvalidPasswordError()

        token: str = self._auth.issue_token(user.id, UserRole(user.role))

        async def _store_token(db: AsyncSession) -> None:
            await self._users.update_token_by_email(db, email, token)

        try:
            await self._provider.execute_tx(_store_token)
        except (AppError, SQLAlchemyError) as exc:
            raise FindTokenError() from exc

        return token

    async def login_by_token(self, token: str) -> AuthenticatedUser:
        """토큰으로 사용자를 인증합니다 (Authenticate a bearer token).

        Raises:
            InvalidTokenError: 토큰 형식 또는 서명 오류 (Malformed or rejected token)
        """
        try:
            return self._auth.authenticate(token)
        except AppError as exc:
            raise InvalidTokenError() from exc
