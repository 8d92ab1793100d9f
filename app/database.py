"""데이터베이스 엔진, 세션 및 트랜잭션 조정 모듈.

Database engine, session and transaction coordination module.
Sets up the async SQLAlchemy engine, session factory, and ORM base class
for the PostgreSQL database connection via asyncpg, and provides the
ConnectionProvider that runs every unit of work either read-only or
inside a transaction.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

T = TypeVar("T")

# 작업 단위 — 세션을 받아 결과를 반환하는 코루틴 (Unit of work: coroutine receiving a live session)
Unit = Callable[[AsyncSession], Awaitable[T]]

# 비동기 데이터베이스 엔진 — Async database engine (asyncpg driver)
# pool_pre_ping=True: 커넥션 풀에서 꺼낸 연결의 유효성을 사전 확인 (Validates connections before use)
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)

# 비동기 세션 팩토리 — Async session factory
# expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit without refresh)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    """

    pass


class ConnectionProvider:
    """작업 단위를 읽기 전용 또는 트랜잭션으로 실행하는 조정자.

    Transaction coordinator. Every repository call made by a service runs
    inside a unit of work handed to one of the two entry points:

    - execute(): read-only, no atomicity guarantee. The session is closed
      (and anything pending discarded) when the unit returns.
    - execute_tx(): the unit runs inside BEGIN ... COMMIT. Any exception
      raised by the unit rolls the transaction back and is re-raised as is.

    Args:
        session_factory: 세션 팩토리 (Session factory bound to an engine)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, unit: Unit[T]) -> T:
        """트랜잭션 없이 작업 단위를 실행합니다.

        Run a read-only unit of work. Connection acquisition failures propagate.
        """
        async with self._session_factory() as session:
            return await unit(session)

    async def execute_tx(self, unit: Unit[T]) -> T:
        """트랜잭션 안에서 작업 단위를 실행합니다.

        Run a unit of work inside a transaction. Commits only if the unit
        returns normally; rolls back and re-raises otherwise.
        """
        async with self._session_factory() as session:
            async with session.begin():
                return await unit(session)

    async def close(self) -> None:
        """연결 풀을 해제합니다 (Dispose the underlying engine pool)."""
        bind = self._session_factory.kw.get("bind")
        if bind is not None:
            await bind.dispose()


class _ForcedRollback(Exception):
    """RollbackConnectionProvider가 내부적으로 사용하는 롤백 신호."""


class RollbackConnectionProvider:
    """항상 롤백하는 테스트 격리용 프로바이더.

    Test-isolation decorator around a ConnectionProvider. Both entry points
    run the unit inside the wrapped provider's transaction and then force a
    rollback with an internal sentinel. The sentinel never reaches the
    caller; the unit's own exception does.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        self._provider = provider

    async def execute(self, unit: Unit[T]) -> T:
        return await self.execute_tx(unit)

    async def execute_tx(self, unit: Unit[T]) -> T:
        results: list[T] = []

        async def _rollback_unit(session: AsyncSession) -> T:
            results.append(await unit(session))
            raise _ForcedRollback("this provider always rolls back transactions")

        try:
            await self._provider.execute_tx(_rollback_unit)
        except _ForcedRollback:
            pass
        return results[0]

    async def close(self) -> None:
        await self._provider.close()


# 전역 프로바이더 — Process-wide provider bound to the application engine
provider: ConnectionProvider = ConnectionProvider(async_session)


def get_provider() -> ConnectionProvider:
    """FastAPI 의존성 — 전역 ConnectionProvider를 반환합니다.

    FastAPI dependency returning the process-wide provider. Tests override
    this to point the services at a temporary database.
    """
    return provider
