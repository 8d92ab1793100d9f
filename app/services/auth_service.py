"""인증 기능 — 비밀번호 해싱, 토큰 발급 및 검증.

Auth capability — Password hashing, token issuance and token
authentication, behind a single injectable interface.

Two token schemes are available (AUTH_TOKEN_SCHEME):
    - plain: "<userID>:<role>", unsigned. Any client can forge a token for
      any role; kept for compatibility with existing clients.
    - jwt: signed PyJWT access token carrying "sub" and "role".
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import jwt

from app.config import Settings, settings
from app.models.user import UserRole
from app.utils.exceptions import ValidationError
from app.utils.jwt import decode_access_token, issue_access_token
from app.utils.password import hash_password, verify_password


class InvalidTokenFormatError(ValidationError):
    message = "invalid token format"


@dataclass(frozen=True)
class AuthenticatedUser:
    """요청 범위의 인증된 사용자 (Request-scoped authenticated caller).

    Attributes:
        user_id: 사용자 UUID (User identifier)
        role: 역할 (employee | moderator)
    """

    user_id: UUID
    role: UserRole


class Authenticator(Protocol):
    """서비스가 사용하는 인증 기능 인터페이스 (Auth capability consumed by services)."""

    def hash_password(self, password: str) -> str: ...

    def compare_password(self, password: str, password_hash: str) -> bool: ...

    def issue_token(self, user_id: UUID, role: UserRole) -> str: ...

    def authenticate(self, token: str) -> AuthenticatedUser: ...


class _BcryptPasswords:
    """bcrypt 기반 비밀번호 처리 (bcrypt password handling shared by both schemes)."""

    def __init__(self, rounds: int | None = None) -> None:
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        return hash_password(password, rounds=self._rounds)

    def compare_password(self, password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)


def _parse_role(value: str) -> UserRole:
    try:
        return UserRole(value)
    except ValueError as exc:
        raise InvalidTokenFormatError(f"unknown role {value!r}") from exc


class PlainTokenAuthenticator(_BcryptPasswords):
    """userID:role 형식의 서명 없는 토큰.

    Unsigned token scheme. The token is a pure function of (user id, role).
    """

    _SEPARATOR = ":"

    def issue_token(self, user_id: UUID, role: UserRole) -> str:
        return f"{user_id}{self._SEPARATOR}{UserRole(role).value}"

    def authenticate(self, token: str) -> AuthenticatedUser:
        parts: list[str] = token.split(self._SEPARATOR)
        if len(parts) != 2:
            raise InvalidTokenFormatError("expected <userID>:<role>")

        user_id_str, role_str = parts
        try:
            user_id = UUID(user_id_str)
        except ValueError as exc:
            raise InvalidTokenFormatError("user id is not a UUID") from exc

        return AuthenticatedUser(user_id=user_id, role=_parse_role(role_str))


class JWTAuthenticator(_BcryptPasswords):
    """서명된 JWT 토큰 (Signed JWT token scheme)."""

    def issue_token(self, user_id: UUID, role: UserRole) -> str:
        return issue_access_token(str(user_id), UserRole(role).value)

    def authenticate(self, token: str) -> AuthenticatedUser:
        try:
            subject, role = decode_access_token(token)
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenFormatError("token rejected") from exc

        try:
            user_id = UUID(subject)
        except ValueError as exc:
            raise InvalidTokenFormatError("user id is not a UUID") from exc

        return AuthenticatedUser(user_id=user_id, role=_parse_role(role))


def build_authenticator(config: Settings = settings) -> Authenticator:
    """설정에 맞는 Authenticator를 생성합니다 (Pick the scheme named by AUTH_TOKEN_SCHEME)."""
    if config.AUTH_TOKEN_SCHEME == "jwt":
        return JWTAuthenticator(rounds=config.BCRYPT_ROUNDS)
    return PlainTokenAuthenticator(rounds=config.BCRYPT_ROUNDS)


# 전역 인스턴스 — Process-wide authenticator
authenticator: Authenticator = build_authenticator()
