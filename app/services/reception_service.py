"""접수 서비스 — 접수/상품 수명주기 비즈니스 로직.

Reception Service — Lifecycle rules for receptions and their products.

State machine per PVZ:
    NoActiveReception --create--> ReceptionInProgress
    ReceptionInProgress --create_product / delete_last_product--> ReceptionInProgress
    ReceptionInProgress --close--> NoActiveReception

Every operation checks the caller's role before anything else, so an
unauthorized caller never learns whether a PVZ id is malformed or whether
a reception is active. The service holds no state of its own; concurrent
creates for the same PVZ are serialized by the uq_receptions_active_pvz
index.
"""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import ConnectionProvider
from app.models.reception import Product, ProductType, Reception, ReceptionStatus
from app.models.user import UserRole
from app.repositories.product_repository import ProductRepository, product_repository
from app.repositories.reception_repository import ReceptionRepository, reception_repository
from app.services.auth_service import AuthenticatedUser
from app.utils.exceptions import AppError, AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


class ReceptionServiceError(AppError):
    message = "reception service error"


class InvalidPVZIDError(ReceptionServiceError, ValidationError):
    message = "reception service error: invalid pvz id"


class CreateReceptionError(ReceptionServiceError):
    message = "reception service error: create failed"


class CreateReceptionFindActiveError(CreateReceptionError):
    message = "reception service error: create failed: find active failed"


class CloseReceptionError(ReceptionServiceError):
    message = "reception service error: close failed"


class CloseReceptionFindActiveError(CloseReceptionError):
    message = "reception service error: close failed: find active failed"


class ProductServiceError(AppError):
    message = "products service error"


class ProductInvalidPVZIDError(ProductServiceError, ValidationError):
    message = "products service error: invalid pvz id"


class InvalidProductTypeError(ProductServiceError, ValidationError):
    message = "products service error: invalid product type"


class CreateProductError(ProductServiceError):
    message = "products service error: create product failed"


class CreateProductFindActiveError(CreateProductError):
    message = "products service error: create product failed: find active failed"


class DeleteProductError(ProductServiceError):
    message = "products service error: delete product failed"


class DeleteProductFindActiveError(DeleteProductError):
    message = "products service error: delete product failed: find active failed"


def _require_employee(auth_user: AuthenticatedUser | None) -> None:
    if auth_user is None or auth_user.role != UserRole.EMPLOYEE:
        raise AuthorizationError()


def _validate_pvz_id(pvz_id: UUID | str, error_cls: type[ValidationError]) -> UUID:
    """PVZ ID가 nil이 아닌 올바른 UUID인지 확인합니다 (Reject malformed or nil ids)."""
    try:
        parsed = pvz_id if isinstance(pvz_id, UUID) else UUID(str(pvz_id))
    except ValueError as exc:
        raise error_cls("uuid is not valid") from exc
    if parsed.int == 0:
        raise error_cls("uuid is not valid")
    return parsed


class ReceptionService:
    """접수 및 상품 수명주기를 처리하는 서비스.

    Service enforcing the reception/product lifecycle. Each repository
    call runs in its own unit of work on the ConnectionProvider: lookups
    through execute(), writes through execute_tx().

    Args:
        provider: 트랜잭션 조정자 (Transaction coordinator)
        receptions: 접수 레포지토리 (Reception repository)
        products: 상품 레포지토리 (Product repository)
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        receptions: ReceptionRepository = reception_repository,
        products: ProductRepository = product_repository,
    ) -> None:
        self._provider = provider
        self._receptions = receptions
        self._products = products

    async def _find_active(self, pvz_id: UUID) -> Reception:
        async def _unit(db: AsyncSession) -> Reception:
            return await self._receptions.find_active(db, pvz_id)

        return await self._provider.execute(_unit)

    async def create(self, auth_user: AuthenticatedUser | None, pvz_id: UUID | str) -> Reception:
        """새 접수를 엽니다.

        Open a new reception for a PVZ and return it as stored, including the
        creation timestamp assigned on insert. Opening a second reception
        while one is in progress fails at the storage layer.

        Args:
            auth_user: 인증된 사용자, 직원만 허용 (Caller, must be an employee)
            pvz_id: PVZ UUID

        Returns:
            Reception: 저장된 진행 중 접수 (The stored in_progress reception)

        Raises:
            AuthorizationError: 직원이 아닐 때 (Caller is not an employee)
            InvalidPVZIDError: 잘못된 PVZ ID (Malformed or nil id)
            CreateReceptionError: 저장 실패 (Insert failed, e.g. reception already open)
            CreateReceptionFindActiveError: 재조회 실패 (Read-after-write failed)
        """
        _require_employee(auth_user)
        pvz_id = _validate_pvz_id(pvz_id, InvalidPVZIDError)

        new_reception = Reception(
            id=uuid.uuid4(),
            pvz_id=pvz_id,
            status=ReceptionStatus.IN_PROGRESS.value,
        )

        async def _insert(db: AsyncSession) -> Reception:
            return await self._receptions.create(db, new_reception)

        try:
            await self._provider.execute_tx(_insert)
        except (AppError, SQLAlchemyError) as exc:
            logger.info("reception create rejected for pvz %s: %s", pvz_id, exc)
            raise CreateReceptionError() from exc

        try:
            return await self._find_active(pvz_id)
        except (AppError, SQLAlchemyError) as exc:
            raise CreateReceptionFindActiveError() from exc

    async def create_product(
        self,
        auth_user: AuthenticatedUser | None,
        pvz_id: UUID | str,
        product_type: ProductType | str,
    ) -> Product:
        """진행 중 접수에 상품을 추가합니다.

        Append a product to the active reception of a PVZ.

        Raises:
            AuthorizationError: 직원이 아닐 때 (Caller is not an employee)
            ProductInvalidPVZIDError: 잘못된 PVZ ID (Malformed or nil id)
            InvalidProductTypeError: 알 수 없는 상품 유형 (Unknown product type)
            CreateProductFindActiveError: 진행 중 접수 없음 (No active reception)
            CreateProductError: 저장 실패 (Insert failed)
        """
        _require_employee(auth_user)
        pvz_id = _validate_pvz_id(pvz_id, ProductInvalidPVZIDError)
        try:
            product_type = ProductType(product_type)
        except ValueError as exc:
            raise InvalidProductTypeError(str(product_type)) from exc

        try:
            reception = await self._find_active(pvz_id)
        except (AppError, SQLAlchemyError) as exc:
            raise CreateProductFindActiveError() from exc

        product = Product(
            id=uuid.uuid4(),
            reception_id=reception.id,
            type=product_type.value,
            created_at=datetime.now(timezone.utc),
        )

        async def _insert(db: AsyncSession) -> Product:
            return await self._products.create(db, product)

        try:
            return await self._provider.execute_tx(_insert)
        except (AppError, SQLAlchemyError) as exc:
            raise CreateProductError() from exc

    async def delete_last_product(self, auth_user: AuthenticatedUser | None, pvz_id: UUID | str) -> None:
        """진행 중 접수의 마지막 상품을 삭제합니다 (LIFO).

        Remove the most recently added product of the active reception.

        Raises:
            AuthorizationError: 직원이 아닐 때 (Caller is not an employee)
            ProductInvalidPVZIDError: 잘못된 PVZ ID (Malformed or nil id)
            DeleteProductFindActiveError: 진행 중 접수 없음 (No active reception)
            DeleteProductError: 삭제 실패 또는 상품 없음 (Delete failed or nothing to delete)
        """
        _require_employee(auth_user)
        pvz_id = _validate_pvz_id(pvz_id, ProductInvalidPVZIDError)

        try:
            reception = await self._find_active(pvz_id)
        except (AppError, SQLAlchemyError) as exc:
            raise DeleteProductFindActiveError() from exc

        async def _delete(db: AsyncSession) -> None:
            await self._products.delete_last(db, reception.id)

        try:
            await self._provider.execute_tx(_delete)
        except (AppError, SQLAlchemyError) as exc:
            raise DeleteProductError() from exc

    async def close(self, auth_user: AuthenticatedUser | None, pvz_id: UUID | str) -> Reception:
        """진행 중 접수를 종료합니다.

        Close the active reception of a PVZ. The returned reception is the
        one read before closing, so its status is still in_progress.

        Raises:
            AuthorizationError: 직원이 아닐 때 (Caller is not an employee)
            InvalidPVZIDError: 잘못된 PVZ ID (Malformed or nil id)
            CloseReceptionFindActiveError: 진행 중 접수 없음 (No active reception)
            CloseReceptionError: 종료 실패 (Update failed)
        """
        _require_employee(auth_user)
        pvz_id = _validate_pvz_id(pvz_id, InvalidPVZIDError)

        try:
            reception = await self._find_active(pvz_id)
        except (AppError, SQLAlchemyError) as exc:
            raise CloseReceptionFindActiveError() from exc

        async def _close(db: AsyncSession) -> None:
            await self._receptions.close(db, reception.id)

        try:
            await self._provider.execute_tx(_close)
        except (AppError, SQLAlchemyError) as exc:
            raise CloseReceptionError() from exc

        return reception
