"""인증 라우터 — 테스트 로그인, 회원가입, 로그인.

Auth Router — Dummy login, registration and credential login.
Token endpoints respond with the bare token as a JSON string.
"""

import logging
import uuid

from fastapi import APIRouter, status

from app.api.deps import Users
from app.schemas.auth import DummyLoginRequest, LoginRequest, RegisterRequest, UserResponse
from app.schemas.common import MessageResponse
from app.utils.exceptions import AppError, BadRequestError, UnauthorizedError

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(
    tags=["Auth"],
    responses={400: {"model": MessageResponse}, 401: {"model": MessageResponse}},
)


@router.post("/dummyLogin", response_model=str)
async def dummy_login(data: DummyLoginRequest, users: Users) -> str:
    """테스트 로그인 — 임시 사용자를 만들고 토큰을 반환.

    Create a throw-away user with the requested role and return its token.
    """
    generated_id: uuid.UUID = uuid.uuid4()
    try:
        user = await users.create(f"{generated_id.hex}@email.foo", str(generated_id), data.role)
    except AppError as exc:
        logger.info("dummy login failed: %s", exc)
        raise BadRequestError() from exc
    return user.token


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, users: Users) -> UserResponse:
    """회원가입 (Register a user; 400 on duplicate email)."""
    try:
        user = await users.create(data.email, data.password, data.role)
    except AppError as exc:
        raise BadRequestError() from exc
    return UserResponse(id=user.id, email=user.email, role=user.role)


@router.post("/login", response_model=str)
async def login(data: LoginRequest, users: Users) -> str:
    """로그인 — 이메일/비밀번호 확인 후 새 토큰 발급.

    Check credentials and return a freshly issued token. Any failure is
    reported as 401 without saying which part was wrong.
    """
    try:
        token: str = await users.find_token_by_email_and_password(data.email, data.password)
        await users.login_by_token(token)
    except AppError as exc:
        raise UnauthorizedError() from exc
    return token
