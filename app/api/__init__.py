"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router for
inclusion in the FastAPI application.

Included routers:
    - auth: 테스트 로그인, 회원가입, 로그인 (Dummy login, registration, login)
    - pvz: PVZ 등록/조회, 접수 종료, 상품 삭제 (PVZ registry and per-PVZ actions)
    - receptions: 접수 생성, 상품 추가 (Open receptions, add products)
"""

from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.pvz import router as pvz_router
from app.api.receptions import router as receptions_router

api_router: APIRouter = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(pvz_router)
api_router.include_router(receptions_router)
