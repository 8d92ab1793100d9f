"""상품 레포지토리 — 상품 생성, 마지막 상품 삭제, 기간 검색.

Product Repository — Insert, delete-last (LIFO) and time-range search
queries for products.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.reception import Product, Reception, ReceptionStatus
from app.repositories.base import BaseRepository
from app.utils.exceptions import NotFoundError, StorageError, ValidationError


class ProductNotFoundError(NotFoundError):
    message = "no products to delete"


class InvalidSearchError(ValidationError):
    message = "invalid search parameters"


class ProductRepositoryError(StorageError):
    message = "products repository error"


class ProductInsertError(ProductRepositoryError):
    message = "products repository error: create failed"


class ProductDeleteError(ProductRepositoryError):
    message = "products repository error: delete failed"


class ProductSearchError(ProductRepositoryError):
    message = "products repository error: search failed"


@dataclass(frozen=True)
class ProductSearch:
    """상품 검색 조건 — 생성 시점에 검증됩니다.

    Product search parameters. Every field is optional; construction
    rejects inconsistent combinations with InvalidSearchError.

    Attributes:
        from_: 시작 시각, 포함 (Lower bound on created_at, inclusive)
        to: 종료 시각, 포함 (Upper bound on created_at, inclusive)
        page: 0부터 시작하는 페이지 번호 (Zero-based page number, requires limit)
        limit: 페이지 크기 (Page size)
    """

    from_: datetime | None = None
    to: datetime | None = None
    page: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.from_ is not None and self.to is not None and self.to < self.from_:
            raise InvalidSearchError("from must be less than to")
        if self.page is not None and self.page < 0:
            raise InvalidSearchError("invalid page")
        if self.limit is not None and self.limit <= 0:
            raise InvalidSearchError("invalid limit")
        if self.page is not None and self.limit is None:
            raise InvalidSearchError("page without limit")

    def to_query(self) -> Select:
        """검색 조건을 SELECT 쿼리로 변환합니다 (Build the parameterized SELECT)."""
        query: Select = select(Product)
        if self.from_ is not None:
            query = query.where(Product.created_at >= self.from_)
        if self.to is not None:
            query = query.where(Product.created_at <= self.to)
        query = query.order_by(Product.created_at)
        if self.limit is not None:
            if self.page is not None:
                query = query.offset(self.page * self.limit)
            query = query.limit(self.limit)
        return query


class ProductRepository(BaseRepository[Product]):
    """products 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the products table.
    """

    def __init__(self) -> None:
        super().__init__(Product)

    async def create(self, db: AsyncSession, product: Product) -> Product:
        """상품을 저장합니다 (Insert a product with its caller-assigned id and timestamp)."""
        try:
            return await self.insert(
                db,
                {
                    "id": product.id,
                    "reception_id": product.reception_id,
                    "type": product.type,
                    "created_at": product.created_at,
                },
            )
        except SQLAlchemyError as exc:
            raise ProductInsertError() from exc

    async def delete_last(self, db: AsyncSession, reception_id: UUID) -> None:
        """접수의 가장 최근 상품 하나를 삭제합니다.

        Delete the product with the greatest created_at for a reception. Only
        an in_progress reception yields a row, so a reception closed since the
        caller looked it up is left untouched.

        Raises:
            ProductDeleteError: 삭제 실패, 또는 삭제할 상품이 없을 때
                (Query failed, or chained from ProductNotFoundError when the
                reception has no products or is no longer in progress)
        """
        last_product_id = (
            select(Product.id)
            .join(Reception, Reception.id == Product.reception_id)
            .where(
                Product.reception_id == reception_id,
                Reception.status == ReceptionStatus.IN_PROGRESS.value,
            )
            .order_by(Product.created_at.desc())
            .limit(1)
            .scalar_subquery()
        )
        statement = (
            delete(Product)
            .where(Product.id == last_product_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as exc:
            raise ProductDeleteError() from exc

        if result.rowcount == 0:
            raise ProductDeleteError() from ProductNotFoundError(f"reception {reception_id}")

    async def search(
        self,
        db: AsyncSession,
        from_: datetime | None = None,
        to: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Product]:
        """기간과 페이지 조건으로 상품을 검색합니다.

        Search products by creation time window with optional pagination,
        ordered by created_at ascending. Arguments are validated before any
        query is sent.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            from_: 시작 시각 (Inclusive lower bound)
            to: 종료 시각 (Inclusive upper bound)
            page: 0부터 시작하는 페이지 (Zero-based page, offset = page * limit)
            limit: 페이지 크기 (Page size)

        Raises:
            ProductSearchError: 검증 실패 또는 쿼리 실패
                (Chained from InvalidSearchError or the driver error)
        """
        try:
            params = ProductSearch(from_=from_, to=to, page=page, limit=limit)
        except InvalidSearchError as exc:
            raise ProductSearchError() from exc

        try:
            result = await db.execute(params.to_query())
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise ProductSearchError() from exc


# 싱글턴 인스턴스 — Singleton instance
product_repository: ProductRepository = ProductRepository()
