"""PVZ 레포지토리 — 픽업 포인트 생성 및 조회.

PVZ Repository — Insert and lookup queries for pickup points.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pvz import PVZ
from app.repositories.base import BaseRepository
from app.utils.exceptions import StorageError


class PVZRepositoryError(StorageError):
    message = "pvzs error"


class PVZInsertError(PVZRepositoryError):
    message = "pvzs error: create failed"


class PVZFindAllError(PVZRepositoryError):
    message = "pvzs error: find all failed"


class PVZFindByIDsError(PVZRepositoryError):
    message = "pvzs error: find by IDs failed"


class PVZRepository(BaseRepository[PVZ]):
    """pvz 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the pvz table.
    """

    def __init__(self) -> None:
        super().__init__(PVZ)

    async def create(self, db: AsyncSession, pvz: PVZ) -> PVZ:
        """PVZ를 저장합니다.

        Insert a pickup point with its caller-assigned id and timestamp.

        Raises:
            PVZInsertError: 저장 실패 시 (Insert failed)
        """
        try:
            return await self.insert(
                db,
                {"id": pvz.id, "city": pvz.city, "registered_at": pvz.registered_at},
            )
        except SQLAlchemyError as exc:
            raise PVZInsertError() from exc

    async def find_all(self, db: AsyncSession) -> list[PVZ]:
        """모든 PVZ를 등록 순서대로 조회합니다 (List every PVZ by registration time)."""
        try:
            return list(await self.select_all(db, order_by=PVZ.registered_at))
        except SQLAlchemyError as exc:
            raise PVZFindAllError() from exc

    async def find_by_ids(self, db: AsyncSession, pvz_ids: Iterable[UUID]) -> list[PVZ]:
        """ID 목록에 해당하는 PVZ를 조회합니다 (Fetch PVZs by id, ordered by registration time)."""
        try:
            return list(await self.select_by_ids(db, pvz_ids, order_by=PVZ.registered_at))
        except SQLAlchemyError as exc:
            raise PVZFindByIDsError() from exc


# 싱글턴 인스턴스 — Singleton instance
pvz_repository: PVZRepository = PVZRepository()
