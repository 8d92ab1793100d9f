"""PVZ 액세스 토큰 JWT 인코딩/디코딩.

Signed access tokens for the "jwt" AUTH_TOKEN_SCHEME. A token names one
user and one role; decoding checks the signature, expiry and that every
claim the authenticator relies on is present.

Claims:
    sub   사용자 UUID 문자열 (User id)
    role  employee | moderator (검증은 호출자 몫, parsed by the caller)
    type  항상 "access" (Always "access")
    exp   만료 시각 (Expiry, JWT_ACCESS_TOKEN_EXPIRE_MINUTES from issue)
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.config import settings

TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ["sub", "role", "type", "exp"]


def issue_access_token(subject: str, role: str) -> str:
    """사용자 ID와 역할로 서명된 토큰을 발급합니다."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {"sub": subject, "role": role, "type": TOKEN_TYPE, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> tuple[str, str]:
    """토큰을 검증하고 (sub, role)을 반환합니다.

    Raises:
        jwt.InvalidTokenError: 서명, 만료, 누락된 클레임 또는 토큰 유형 불일치
            (Bad signature, expired, missing claim, or not an access token)
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )
    if payload["type"] != TOKEN_TYPE:
        raise jwt.InvalidTokenError(f"unexpected token type {payload['type']!r}")
    return str(payload["sub"]), str(payload["role"])
