"""테스트 인프라 — 임시 DB, ConnectionProvider, httpx 클라이언트 픽스처.

Test infrastructure — Temporary database, ConnectionProvider and httpx
client fixtures.

TEST_DATABASE_URL selects the database. Without it every test gets its own
SQLite file through aiosqlite; with a PostgreSQL URL the schema is created
before and dropped after each test.
"""

import os

# 빠른 해싱 — Cheap bcrypt cost for tests, must be set before app imports
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import AsyncGenerator
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.database import Base, ConnectionProvider, get_provider
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.models.user import UserRole
from app.services.auth_service import PlainTokenAuthenticator

TEST_DATABASE_URL: str | None = os.environ.get("TEST_DATABASE_URL")


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 프로바이더, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 스키마를 만들고 테스트 후 삭제합니다."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    eng = create_async_engine(url, echo=False)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """레포지토리 테스트용 세션 — 커밋하지 않고 닫습니다."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def provider(session_factory: async_sessionmaker[AsyncSession]) -> ConnectionProvider:
    return ConnectionProvider(session_factory)


@pytest_asyncio.fixture
async def client(provider: ConnectionProvider) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — ConnectionProvider를 오버라이드합니다."""
    app.dependency_overrides[get_provider] = lambda: provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 토큰
# ---------------------------------------------------------------------------
_tokens = PlainTokenAuthenticator()


def make_token(role: UserRole, user_id: UUID | None = None) -> str:
    """테스트용 "<userID>:<role>" 토큰을 생성합니다."""
    return _tokens.issue_token(user_id or UUID("7f1b9a52-0c6e-4f0e-9a57-3d2c1e5b8a44"), role)


@pytest.fixture
def employee_token() -> str:
    return make_token(UserRole.EMPLOYEE)


@pytest.fixture
def moderator_token() -> str:
    return make_token(UserRole.MODERATOR)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class DirectProvider:
    """세션 없이 작업 단위를 바로 실행하는 가짜 프로바이더.

    Fake provider for service tests with mocked repositories; records
    which entry point each unit went through.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.session = object()

    async def execute(self, unit):
        self.calls.append("execute")
        return await unit(self.session)

    async def execute_tx(self, unit):
        self.calls.append("execute_tx")
        return await unit(self.session)
