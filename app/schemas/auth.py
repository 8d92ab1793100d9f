"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers dummy login, registration and credential login. Token endpoints
respond with a bare JSON string.
"""

from uuid import UUID

from pydantic import BaseModel

from app.models.user import UserRole


class DummyLoginRequest(BaseModel):
    """테스트용 로그인 요청 스키마.

    Dummy login request. A throw-away user with this role is created and
    its token returned.
    """

    role: UserRole


class RegisterRequest(BaseModel):
    """회원가입 요청 스키마.

    Attributes:
        email: 이메일 — 전역 고유 (Login email, globally unique)
        password: 비밀번호 (Plain text, bcrypt-hashed on server)
        role: 역할 (employee | moderator)
    """

    email: str
    password: str  # 평문, 서버에서 bcrypt 해싱 (Plain text, server hashes with bcrypt)
    role: UserRole


class LoginRequest(BaseModel):
    """로그인 요청 스키마 (Credential login request)."""

    email: str
    password: str


class UserResponse(BaseModel):
    """사용자 응답 스키마 (Registered user; the hash and token are never returned)."""

    id: UUID
    email: str
    role: UserRole
