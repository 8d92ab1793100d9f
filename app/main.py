"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리기 및 라우터 등록.

FastAPI application entry point — Middleware, exception handlers and
router registration.

Every error response has the body ``{"message": "..."}``. Request
validation failures are reported as 400 rather than FastAPI's default 422.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import api_router
from app.config import settings
from app.database import provider
from app.middleware.axiom_logging import AxiomLoggingMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    # 종료 시 연결 풀 해제 — Release pooled connections on shutdown
    await provider.close()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
app.add_middleware(AxiomLoggingMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException을 {"message": detail} 형식으로 변환합니다."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패를 400으로 응답합니다 (Malformed request → 400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Неверный запрос"},
    )


app.include_router(api_router)
