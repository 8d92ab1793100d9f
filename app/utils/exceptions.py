"""애플리케이션 예외 클래스 모듈.

Application exception classes module.

Two families live here:

- AppError and its categories (AuthorizationError, ValidationError,
  NotFoundError, StorageError). Repositories and services raise subclasses
  of these and chain the underlying cause with ``raise ... from exc``, so a
  caller can test the failure category with ``isinstance`` and still read
  the full cause chain from ``str(error)``.
- Pre-configured HTTPException subclasses used by routers to turn an
  application error into a response. Their ``detail`` is rendered as
  ``{"message": detail}`` by the handler registered in app.main.

Usage:
    from app.utils.exceptions import BadRequestError, ForbiddenError
    raise BadRequestError("Неверный запрос")
"""

from fastapi import HTTPException, status


class AppError(Exception):
    """모든 도메인 예외의 기반 클래스.

    Base class for domain errors. ``message`` names the failure category;
    ``str()`` appends the optional detail and the chained cause.

    Args:
        detail: 추가 설명 (Optional descriptive detail)
    """

    message: str = "application error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)

    def __str__(self) -> str:
        parts: list[str] = [self.message]
        if self.detail:
            parts.append(self.detail)
        # __cause__는 raise ... from 이후에 설정됨 (set after construction by raise ... from)
        if self.__cause__ is not None:
            parts.append(str(self.__cause__))
        return ": ".join(parts)


class AuthorizationError(AppError):
    """역할이 없거나 부족할 때 (Missing or wrong role)."""

    message = "empty or access denied error"


class ValidationError(AppError):
    """잘못된 식별자나 검색 파라미터 (Malformed identifier or search parameters)."""

    message = "validation failed"


class NotFoundError(AppError):
    """대상 행이 존재하지 않을 때 (No matching row)."""

    message = "not found"


class StorageError(AppError):
    """연결 또는 쿼리 실패 (Connection or query failure)."""

    message = "storage error"


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised when the caller is unauthenticated or holds the wrong role.

    Args:
        detail: 오류 메시지 (Error message, default: "Доступ запрещен")
    """

    def __init__(self, detail: str = "Доступ запрещен") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when login credentials are invalid.

    Args:
        detail: 오류 메시지 (Error message, default: "Неверные учетные данные")
    """

    def __init__(self, detail: str = "Неверные учетные данные") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    Every domain failure other than authorization degrades to this response,
    including storage failures and "nothing to act on".

    Args:
        detail: 오류 메시지 (Error message, default: "Неверный запрос")
    """

    def __init__(self, detail: str = "Неверный запрос") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
