"""접수 레포지토리 — 접수 생성, 진행 중 접수 조회, 종료.

Reception Repository — Insert, active lookup, close and id lookup queries
for receptions. Contains no business rules: the one-active-reception-per-PVZ
invariant is enforced by the uq_receptions_active_pvz index.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.reception import Reception, ReceptionStatus
from app.repositories.base import BaseRepository
from app.utils.exceptions import NotFoundError, StorageError


class ReceptionNotFoundError(NotFoundError):
    message = "reception not found"


class ReceptionRepositoryError(StorageError):
    message = "receptions error"


class ReceptionInsertError(ReceptionRepositoryError):
    message = "receptions error: create failed"


class ReceptionFindActiveError(ReceptionRepositoryError):
    message = "receptions error: find active failed"


class ReceptionCloseError(ReceptionRepositoryError):
    message = "receptions error: close failed"


class ReceptionFindByIDsError(ReceptionRepositoryError):
    message = "receptions error: find by IDs failed"


class ReceptionRepository(BaseRepository[Reception]):
    """receptions 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the receptions table.
    """

    def __init__(self) -> None:
        super().__init__(Reception)

    async def create(self, db: AsyncSession, reception: Reception) -> Reception:
        """새 접수를 in_progress 상태로 저장합니다.

        Insert a reception. The status is always in_progress regardless of
        the value carried by ``reception``; created_at is assigned on insert.

        Raises:
            ReceptionInsertError: 저장 실패 시, 이미 진행 중 접수가 있는 경우 포함
                                  (Insert failed, including a second active reception)
        """
        try:
            return await self.insert(
                db,
                {
                    "id": reception.id,
                    "pvz_id": reception.pvz_id,
                    "status": ReceptionStatus.IN_PROGRESS.value,
                },
            )
        except SQLAlchemyError as exc:
            raise ReceptionInsertError() from exc

    async def find_active(self, db: AsyncSession, pvz_id: UUID) -> Reception:
        """PVZ의 진행 중 접수를 조회합니다.

        Return the single in_progress reception of a PVZ.

        Raises:
            ReceptionFindActiveError: 조회 실패 또는 진행 중 접수 없음
                (Query failed, or chained from ReceptionNotFoundError when none exists)
        """
        query: Select = select(Reception).where(
            Reception.pvz_id == pvz_id,
            Reception.status == ReceptionStatus.IN_PROGRESS.value,
        )
        try:
            result = await db.execute(query)
            reception: Reception | None = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise ReceptionFindActiveError() from exc

        if reception is None:
            raise ReceptionFindActiveError() from ReceptionNotFoundError(f"pvz {pvz_id}")
        return reception

    async def close(self, db: AsyncSession, reception_id: UUID) -> None:
        """진행 중 접수를 close 상태로 변경합니다.

        Mark an in_progress reception as closed.

        Raises:
            ReceptionCloseError: 갱신 실패, 또는 이미 종료된 접수일 때
                (Update failed, or chained from ReceptionNotFoundError when no
                in_progress reception has this id)
        """
        statement = (
            update(Reception)
            .where(
                Reception.id == reception_id,
                Reception.status == ReceptionStatus.IN_PROGRESS.value,
            )
            .values(status=ReceptionStatus.CLOSE.value)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as exc:
            raise ReceptionCloseError() from exc

        if result.rowcount == 0:
            raise ReceptionCloseError() from ReceptionNotFoundError(f"reception {reception_id}")

    async def find_by_ids(self, db: AsyncSession, reception_ids: Iterable[UUID]) -> list[Reception]:
        """ID 목록에 해당하는 접수를 생성 순서대로 조회합니다.

        Fetch receptions by id, ordered by creation time.
        """
        try:
            return list(await self.select_by_ids(db, reception_ids, order_by=Reception.created_at))
        except SQLAlchemyError as exc:
            raise ReceptionFindByIDsError() from exc


# 싱글턴 인스턴스 — Singleton instance
reception_repository: ReceptionRepository = ReceptionRepository()
