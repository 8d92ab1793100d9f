"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per request to Axiom: method, path, query and
path params, request body, status code, duration and, for error responses,
the ``message`` returned to the client. Passwords and tokens are masked
before anything leaves the process. Without AXIOM_API_TOKEN and
AXIOM_DATASET the middleware is a pass-through.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and params
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/docs", "/redoc", "/openapi.json"}

# 본문을 읽는 메서드 — Methods whose body is captured
_BODY_METHODS = ("POST", "PUT", "PATCH")


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask_dict(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    return data


def _error_message(body: bytes) -> str:
    """에러 응답 본문에서 메시지 추출 (Pull "message" out of an error body)."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:500]
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])[:500]
    return str(data)[:500]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Args:
        app: ASGI 애플리케이션 (Wrapped application)
        client: Axiom 클라이언트, None이면 설정으로 생성
            (Axiom client; built from settings when omitted)
        dataset: 데이터셋 이름 (Dataset name, defaults to AXIOM_DATASET)
    """

    def __init__(
        self,
        app: ASGIApp,
        client: AxiomClient | None = None,
        dataset: str | None = None,
    ) -> None:
        super().__init__(app)
        self._dataset: str = dataset or settings.AXIOM_DATASET
        self._client: AxiomClient | None = client

        if self._client is None and settings.AXIOM_API_TOKEN and self._dataset:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Axiom 미설정시 패스스루 — Pass through if Axiom not configured
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        event: dict[str, Any] = {
            "service": settings.APP_NAME,
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = _mask_dict(dict(request.query_params))

        if request.method in _BODY_METHODS:
            body_bytes = await request.body()
            if body_bytes:
                try:
                    event["request_body"] = _mask_dict(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code
            if request.path_params:
                event["path_params"] = dict(request.path_params)

            # 에러 응답시 body에서 사유 추출 — Extract the message from error responses
            if response.status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event["error"] = _error_message(resp_body)

                # 소비한 body를 다시 응답으로 반환 — Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:
            logger.warning("axiom ingest failed: %s", exc)
