"""레포지토리 테스트 — PVZ, 접수, 상품, 사용자 쿼리.

Repository tests against a temporary database: inserts, the single active
reception rule, LIFO delete and the product search window.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pvz import PVZ, City
from app.models.reception import Product, ProductType, Reception, ReceptionStatus
from app.models.user import User, UserRole
from app.repositories.product_repository import (
    InvalidSearchError,
    ProductDeleteError,
    ProductNotFoundError,
    ProductSearch,
    ProductSearchError,
    product_repository,
)
from app.repositories.pvz_repository import pvz_repository
from app.repositories.reception_repository import (
    ReceptionCloseError,
    ReceptionFindActiveError,
    ReceptionInsertError,
    ReceptionNotFoundError,
    reception_repository,
)
from app.repositories.user_repository import (
    UserInsertError,
    UserNotFoundError,
    UserReadError,
    UserUpdateTokenError,
    user_repository,
)
from app.utils.exceptions import NotFoundError, StorageError, ValidationError

T0 = datetime(2025, 4, 1, 10, 0, tzinfo=timezone.utc)


async def _pvz(db: AsyncSession, registered_at: datetime = T0) -> PVZ:
    return await pvz_repository.create(
        db, PVZ(id=uuid.uuid4(), city=City.MOSCOW.value, registered_at=registered_at)
    )


async def _reception(db: AsyncSession, pvz_id: uuid.UUID) -> Reception:
    return await reception_repository.create(
        db, Reception(id=uuid.uuid4(), pvz_id=pvz_id, status=ReceptionStatus.IN_PROGRESS.value)
    )


async def _product(db: AsyncSession, reception_id: uuid.UUID, created_at: datetime) -> Product:
    return await product_repository.create(
        db,
        Product(
            id=uuid.uuid4(),
            reception_id=reception_id,
            type=ProductType.SHOES.value,
            created_at=created_at,
        ),
    )


class TestPVZRepository:
    """PVZ 레포지토리 테스트."""

    async def test_create_and_find_all(self, db: AsyncSession):
        later = await _pvz(db, T0 + timedelta(days=1))
        earlier = await _pvz(db, T0)

        found = await pvz_repository.find_all(db)
        assert [p.id for p in found] == [earlier.id, later.id]

    async def test_find_by_ids(self, db: AsyncSession):
        first = await _pvz(db)
        await _pvz(db)

        found = await pvz_repository.find_by_ids(db, [first.id])
        assert [p.id for p in found] == [first.id]

    async def test_find_by_ids_empty(self, db: AsyncSession):
        await _pvz(db)
        assert await pvz_repository.find_by_ids(db, []) == []


class TestReceptionRepository:
    """접수 레포지토리 테스트."""

    async def test_create_is_always_in_progress(self, db: AsyncSession):
        pvz = await _pvz(db)
        reception = await reception_repository.create(
            db, Reception(id=uuid.uuid4(), pvz_id=pvz.id, status=ReceptionStatus.CLOSE.value)
        )
        assert reception.status == ReceptionStatus.IN_PROGRESS.value
        assert reception.created_at is not None

    async def test_find_active(self, db: AsyncSession):
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)

        active = await reception_repository.find_active(db, pvz.id)
        assert active.id == reception.id

    async def test_find_active_none(self, db: AsyncSession):
        """진행 중 접수가 없으면 NotFound가 원인으로 연결됨."""
        pvz = await _pvz(db)

        with pytest.raises(ReceptionFindActiveError) as exc_info:
            await reception_repository.find_active(db, pvz.id)
        assert isinstance(exc_info.value, StorageError)
        assert isinstance(exc_info.value.__cause__, ReceptionNotFoundError)
        assert isinstance(exc_info.value.__cause__, NotFoundError)
        assert "find active failed" in str(exc_info.value)

    async def test_second_active_reception_rejected(self, db: AsyncSession):
        """PVZ당 진행 중 접수는 하나뿐."""
        pvz = await _pvz(db)
        await _reception(db, pvz.id)

        with pytest.raises(ReceptionInsertError, match="create failed"):
            await _reception(db, pvz.id)

    async def test_close_then_reopen(self, db: AsyncSession):
        pvz = await _pvz(db)
        first = await _reception(db, pvz.id)

        await reception_repository.close(db, first.id)
        with pytest.raises(ReceptionFindActiveError):
            await reception_repository.find_active(db, pvz.id)

        second = await _reception(db, pvz.id)
        assert (await reception_repository.find_active(db, pvz.id)).id == second.id

    async def test_close_twice_rejected(self, db: AsyncSession):
        """이미 종료된 접수는 다시 종료할 수 없음."""
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)
        await reception_repository.close(db, reception.id)

        with pytest.raises(ReceptionCloseError) as exc_info:
            await reception_repository.close(db, reception.id)
        assert isinstance(exc_info.value.__cause__, ReceptionNotFoundError)

    async def test_find_by_ids(self, db: AsyncSession):
        pvz_a = await _pvz(db)
        pvz_b = await _pvz(db)
        reception_a = await _reception(db, pvz_a.id)
        reception_b = await _reception(db, pvz_b.id)

        found = await reception_repository.find_by_ids(db, [reception_b.id, reception_a.id])
        assert {r.id for r in found} == {reception_a.id, reception_b.id}


class TestProductRepository:
    """상품 레포지토리 테스트."""

    async def test_delete_last_is_lifo(self, db: AsyncSession):
        """마지막 상품부터 삭제되고, 없으면 실패."""
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)
        await _product(db, reception.id, T0)
        await _product(db, reception.id, T0 + timedelta(minutes=1))
        await _product(db, reception.id, T0 + timedelta(minutes=2))

        await product_repository.delete_last(db, reception.id)
        remaining = await product_repository.search(db)
        assert [p.created_at.replace(tzinfo=None) for p in remaining] == [
            T0.replace(tzinfo=None),
            (T0 + timedelta(minutes=1)).replace(tzinfo=None),
        ]

        await product_repository.delete_last(db, reception.id)
        await product_repository.delete_last(db, reception.id)
        assert await product_repository.search(db) == []

        with pytest.raises(ProductDeleteError) as exc_info:
            await product_repository.delete_last(db, reception.id)
        assert isinstance(exc_info.value.__cause__, ProductNotFoundError)

    async def test_delete_last_skips_closed_reception(self, db: AsyncSession):
        """조회 후 종료된 접수의 상품은 삭제되지 않음."""
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)
        kept = await _product(db, reception.id, T0)
        await reception_repository.close(db, reception.id)

        with pytest.raises(ProductDeleteError) as exc_info:
            await product_repository.delete_last(db, reception.id)
        assert isinstance(exc_info.value.__cause__, ProductNotFoundError)
        assert [p.id for p in await product_repository.search(db)] == [kept.id]

    async def test_delete_last_only_touches_its_reception(self, db: AsyncSession):
        pvz_a = await _pvz(db)
        pvz_b = await _pvz(db)
        reception_a = await _reception(db, pvz_a.id)
        reception_b = await _reception(db, pvz_b.id)
        kept = await _product(db, reception_a.id, T0 + timedelta(hours=1))
        await _product(db, reception_b.id, T0)

        await product_repository.delete_last(db, reception_b.id)
        assert [p.id for p in await product_repository.search(db)] == [kept.id]

    async def test_search_window_is_inclusive(self, db: AsyncSession):
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)
        before = await _product(db, reception.id, T0 - timedelta(hours=1))
        first = await _product(db, reception.id, T0)
        last = await _product(db, reception.id, T0 + timedelta(hours=2))
        await _product(db, reception.id, T0 + timedelta(hours=3))

        found = await product_repository.search(db, from_=T0, to=T0 + timedelta(hours=2))
        assert [p.id for p in found] == [first.id, last.id]

        found = await product_repository.search(db, to=T0)
        assert [p.id for p in found] == [before.id, first.id]

    async def test_search_pages_are_zero_based(self, db: AsyncSession):
        pvz = await _pvz(db)
        reception = await _reception(db, pvz.id)
        products = [await _product(db, reception.id, T0 + timedelta(minutes=i)) for i in range(5)]

        page_0 = await product_repository.search(db, page=0, limit=2)
        page_1 = await product_repository.search(db, page=1, limit=2)
        page_2 = await product_repository.search(db, page=2, limit=2)
        assert [p.id for p in page_0] == [products[0].id, products[1].id]
        assert [p.id for p in page_1] == [products[2].id, products[3].id]
        assert [p.id for p in page_2] == [products[4].id]

        limited = await product_repository.search(db, limit=3)
        assert len(limited) == 3

    @pytest.mark.parametrize(
        ("kwargs", "reason"),
        [
            ({"from_": T0, "to": T0 - timedelta(hours=1)}, "from must be less than to"),
            ({"page": -1, "limit": 1}, "invalid page"),
            ({"page": 1, "limit": 0}, "invalid limit"),
            ({"page": 1, "limit": None}, "page without limit"),
        ],
    )
    async def test_search_validation(self, db: AsyncSession, kwargs, reason):
        """잘못된 검색 조건은 쿼리 전에 거부됨."""
        with pytest.raises(ProductSearchError) as exc_info:
            await product_repository.search(db, **kwargs)
        assert isinstance(exc_info.value.__cause__, InvalidSearchError)
        assert "search failed" in str(exc_info.value)
        assert reason in str(exc_info.value)

    def test_product_search_accepts_equal_bounds(self):
        ProductSearch(from_=T0, to=T0)

    def test_product_search_error_is_validation_error(self):
        with pytest.raises(ValidationError, match="invalid limit"):
            ProductSearch(limit=-5)


class TestUserRepository:
    """사용자 레포지토리 테스트."""

    def _user(self, email: str = "user@test.com") -> User:
        return User(
            id=uuid.uuid4(),
            email=email,
            role=UserRole.EMPLOYEE.value,
            password_hash="hash",
            token="token",
        )

    async def test_create_and_read_by_email(self, db: AsyncSession):
        user = await user_repository.create(db, self._user())

        found = await user_repository.read_by_email(db, "user@test.com")
        assert found.id == user.id
        assert found.role == UserRole.EMPLOYEE.value

    async def test_duplicate_email_rejected(self, db: AsyncSession):
        await user_repository.create(db, self._user())

        with pytest.raises(UserInsertError):
            await user_repository.create(db, self._user())

    async def test_read_unknown_email(self, db: AsyncSession):
        with pytest.raises(UserReadError) as exc_info:
            await user_repository.read_by_email(db, "nobody@test.com")
        assert isinstance(exc_info.value.__cause__, UserNotFoundError)

    async def test_update_token_by_email(self, db: AsyncSession):
        await user_repository.create(db, self._user())

        await user_repository.update_token_by_email(db, "user@test.com", "fresh-token")
        db.expire_all()
        assert (await user_repository.read_by_email(db, "user@test.com")).token == "fresh-token"

    async def test_update_token_unknown_email(self, db: AsyncSession):
        with pytest.raises(UserUpdateTokenError):
            await user_repository.update_token_by_email(db, "nobody@test.com", "t")
