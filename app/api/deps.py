"""FastAPI 의존성 주입 모듈 — 인증 및 서비스 생성.

FastAPI dependency injection module — Authentication and service wiring.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송 (선택)
       (Client optionally sends Authorization: Bearer <token>)
    2. HTTPBearer가 토큰을 추출, 없으면 None
       (HTTPBearer extracts the token, None when absent)
    3. UserService.login_by_token()이 토큰을 AuthenticatedUser로 변환
       (Token is resolved to an AuthenticatedUser)
    4. 토큰이 없거나 잘못되면 None을 서비스에 전달, 권한 검사는 서비스가 수행
       (Missing or rejected tokens become None; services do the role check)
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.database import ConnectionProvider, get_provider
from app.services.auth_service import AuthenticatedUser
from app.services.pvz_service import PVZService
from app.services.reception_service import ReceptionService
from app.services.user_service import InvalidTokenError, UserService

# HTTP Bearer 토큰 추출기 — auto_error=False: 헤더가 없어도 401을 내지 않음
# (Header is optional; a missing token reaches the service as None)
security: HTTPBearer = HTTPBearer(auto_error=False)

Provider = Annotated[ConnectionProvider, Depends(get_provider)]


def get_user_service(provider: Provider) -> UserService:
    return UserService(provider)


def get_reception_service(provider: Provider) -> ReceptionService:
    return ReceptionService(provider)


def get_pvz_service(provider: Provider) -> PVZService:
    return PVZService(provider)


async def get_auth_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> AuthenticatedUser | None:
    """요청의 Bearer 토큰에서 인증된 사용자를 추출합니다.

    Resolve the bearer token to an AuthenticatedUser, or None when the
    header is missing or the token is rejected.
    """
    if credentials is None:
        return None
    try:
        return await users.login_by_token(credentials.credentials)
    except InvalidTokenError:
        return None


# 편의 타입 — Annotated shortcuts used by routers
CurrentUser = Annotated[AuthenticatedUser | None, Depends(get_auth_user)]
Users = Annotated[UserService, Depends(get_user_service)]
Receptions = Annotated[ReceptionService, Depends(get_reception_service)]
PVZs = Annotated[PVZService, Depends(get_pvz_service)]
