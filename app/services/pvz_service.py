"""PVZ 서비스 — PVZ 등록, 목록 및 접수/상품 집계 조회.

PVZ Service — Registration, listing and the nested PVZ → receptions →
products search.

The search runs in three read-only stages (products in the time window,
their receptions, the PVZs owning those receptions) and joins the results
in memory with build_pvz_reception_products().
"""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import ConnectionProvider
from app.models.pvz import PVZ, City
from app.models.reception import Product, Reception
from app.models.user import UserRole
from app.repositories.product_repository import ProductRepository, product_repository
from app.repositories.pvz_repository import PVZRepository, pvz_repository
from app.repositories.reception_repository import ReceptionRepository, reception_repository
from app.services.auth_service import AuthenticatedUser
from app.utils.exceptions import AppError, AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


class PVZServiceError(AppError):
    message = "pvz service error"


class InvalidCityError(PVZServiceError, ValidationError):
    message = "pvz service error: invalid city"


class CreatePVZError(PVZServiceError):
    message = "pvz service error: create pvz failed"


class FindAllPVZError(PVZServiceError):
    message = "pvz service error: find all failed"


class PVZSearchError(PVZServiceError):
    message = "pvz service error: search failed"


class SearchProductsError(PVZSearchError):
    message = "pvz service error: search failed: search products failed"


class SearchReceptionsError(PVZSearchError):
    message = "pvz service error: search failed: search receptions failed"


class SearchPVZsError(PVZSearchError):
    message = "pvz service error: search failed: search pvzs failed"


@dataclass
class ReceptionProducts:
    """접수와 그 상품 목록 (A reception with the products found for it)."""

    reception: Reception
    products: list[Product] = field(default_factory=list)


@dataclass
class PVZReceptionProducts:
    """PVZ와 그 접수 목록 (A PVZ with its matching receptions)."""

    pvz: PVZ
    receptions: list[ReceptionProducts] = field(default_factory=list)


def build_pvz_reception_products(
    products: list[Product],
    receptions: list[Reception],
    pvzs: list[PVZ],
) -> list[PVZReceptionProducts]:
    """세 개의 평면 목록을 PVZ → 접수 → 상품 트리로 조립합니다.

    Group products by reception id and receptions by PVZ id, then walk the
    PVZs in the order given. Receptions keep their lookup order, products
    keep their search order. Products whose reception is missing from
    ``receptions`` are dropped, as are receptions whose PVZ is missing.
    """
    products_by_reception: dict[UUID, list[Product]] = defaultdict(list)
    for product in products:
        products_by_reception[product.reception_id].append(product)

    receptions_by_pvz: dict[UUID, list[Reception]] = defaultdict(list)
    for reception in receptions:
        receptions_by_pvz[reception.pvz_id].append(reception)

    return [
        PVZReceptionProducts(
            pvz=pvz,
            receptions=[
                ReceptionProducts(reception=reception, products=products_by_reception[reception.id])
                for reception in receptions_by_pvz[pvz.id]
            ],
        )
        for pvz in pvzs
    ]


class PVZService:
    """PVZ 등록 및 집계 조회 서비스.

    Args:
        provider: 트랜잭션 조정자 (Transaction coordinator)
        pvzs: PVZ 레포지토리 (PVZ repository)
        products: 상품 레포지토리 (Product repository)
        receptions: 접수 레포지토리 (Reception repository)
        require_moderator: True면 모더레이터만 PVZ 생성 가능
            (Restrict create() to moderators)
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        pvzs: PVZRepository = pvz_repository,
        products: ProductRepository = product_repository,
        receptions: ReceptionRepository = reception_repository,
        require_moderator: bool | None = None,
    ) -> None:
        self._provider = provider
        self._pvzs = pvzs
        self._products = products
        self._receptions = receptions
        if require_moderator is None:
            require_moderator = settings.PVZ_CREATE_REQUIRES_MODERATOR
        self._require_moderator = require_moderator

    async def create(self, auth_user: AuthenticatedUser | None, city: City | str) -> PVZ:
        """새 PVZ를 등록합니다.

        Register a pickup point with a fresh id and the current time.

        Raises:
            AuthorizationError: 모더레이터 전용 설정에서 권한 부족
                (Caller is not a moderator while require_moderator is on)
            InvalidCityError: 지원하지 않는 도시 (Unknown city)
            CreatePVZError: 저장 실패 (Insert failed)
        """
        if self._require_moderator and (auth_user is None or auth_user.role != UserRole.MODERATOR):
            raise AuthorizationError()

        try:
            city = City(city)
        except ValueError as exc:
            raise InvalidCityError(str(city)) from exc

        pvz = PVZ(id=uuid.uuid4(), city=city.value, registered_at=datetime.now(timezone.utc))

        async def _insert(db: AsyncSession) -> PVZ:
            return await self._pvzs.create(db, pvz)

        try:
            return await self._provider.execute_tx(_insert)
        except (AppError, SQLAlchemyError) as exc:
            logger.warning("pvz create failed: %s", exc)
            raise CreatePVZError() from exc

    async def find_all(self) -> list[PVZ]:
        """등록된 모든 PVZ를 조회합니다 (List every registered PVZ)."""

        async def _unit(db: AsyncSession) -> list[PVZ]:
            return await self._pvzs.find_all(db)

        try:
            return await self._provider.execute(_unit)
        except (AppError, SQLAlchemyError) as exc:
            raise FindAllPVZError() from exc

    async def find_pvz_reception_products(
        self,
        from_: datetime | None = None,
        to: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[PVZReceptionProducts]:
        """기간 내 상품을 PVZ/접수 단위로 묶어 조회합니다.

        Search products created in [from_, to] (paginated), then load their
        receptions and PVZs and return the nested view. Each stage runs as
        its own read-only unit of work.

        Args:
            from_: 시작 시각 (Inclusive lower bound)
            to: 종료 시각 (Inclusive upper bound)
            page: 0부터 시작하는 페이지 (Zero-based page)
            limit: 페이지 크기 (Page size)

        Raises:
            SearchProductsError: 상품 검색 실패 또는 잘못된 검색 조건
                (Product stage failed, including invalid parameters)
            SearchReceptionsError: 접수 조회 실패 (Reception stage failed)
            SearchPVZsError: PVZ 조회 실패 (PVZ stage failed)
        """

        async def _search_products(db: AsyncSession) -> list[Product]:
            return await self._products.search(db, from_=from_, to=to, page=page, limit=limit)

        try:
            products: list[Product] = await self._provider.execute(_search_products)
        except (AppError, SQLAlchemyError) as exc:
            raise SearchProductsError() from exc

        # 중복 제거, 순서 유지 — distinct ids, first-seen order
        reception_ids: list[UUID] = list(dict.fromkeys(p.reception_id for p in products))

        async def _find_receptions(db: AsyncSession) -> list[Reception]:
            return await self._receptions.find_by_ids(db, reception_ids)

        try:
            receptions: list[Reception] = await self._provider.execute(_find_receptions)
        except (AppError, SQLAlchemyError) as exc:
            raise SearchReceptionsError() from exc

        pvz_ids: list[UUID] = list(dict.fromkeys(r.pvz_id for r in receptions))

        async def _find_pvzs(db: AsyncSession) -> list[PVZ]:
            return await self._pvzs.find_by_ids(db, pvz_ids)

        try:
            pvzs: list[PVZ] = await self._provider.execute(_find_pvzs)
        except (AppError, SQLAlchemyError) as exc:
            raise SearchPVZsError() from exc

        return build_pvz_reception_products(products, receptions, pvzs)
