"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base Repository — Parent class for all entity repositories.
Provides the generic insert and lookup-by-ids operations; subclasses add
entity-specific queries and wrap failures in their own error classes.

Usage:
    class PVZRepository(BaseRepository[PVZ]):
        def __init__(self) -> None:
            super().__init__(PVZ)
"""

from collections.abc import Iterable
from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 레포지토리.

    Generic repository providing common database operations against a
    caller-supplied session. Repositories never commit; the transaction is
    owned by the ConnectionProvider unit that called them.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def insert(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Insert a new record and return it with server-side values loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def select_by_ids(
        self,
        db: AsyncSession,
        record_ids: Iterable[UUID],
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """ID 목록에 해당하는 레코드를 조회합니다.

        Retrieve every record whose id is in ``record_ids``. An empty id list
        yields an empty result.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_ids: 조회할 UUID 목록 (UUIDs to look up)
            order_by: 정렬 기준 컬럼 (Column to order by)

        Returns:
            Sequence[ModelType]: 조회된 레코드 목록 (Matching records)
        """
        query: Select = select(self.model).where(self.model.id.in_(list(record_ids)))
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def select_all(
        self,
        db: AsyncSession,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """모든 레코드를 조회합니다 (Retrieve all records)."""
        query: Select = select(self.model)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()
