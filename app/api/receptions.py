"""접수/상품 라우터 — 접수 생성, 상품 추가.

Receptions Router — Open a reception and add products to it. Closing a
reception and removing products live under /pvz/{pvzId} in app.api.pvz.
"""

from fastapi import APIRouter, status

from app.api.deps import CurrentUser, Receptions
from app.models.reception import Product, Reception
from app.schemas.reception import (
    ProductCreateRequest,
    ProductResponse,
    ReceptionCreateRequest,
    ReceptionResponse,
)
from app.schemas.common import MessageResponse
from app.utils.exceptions import AppError, AuthorizationError, BadRequestError, ForbiddenError

router: APIRouter = APIRouter(
    tags=["Receptions"],
    responses={400: {"model": MessageResponse}, 403: {"model": MessageResponse}},
)


def reception_to_response(reception: Reception) -> ReceptionResponse:
    return ReceptionResponse(
        id=reception.id,
        created_at=reception.created_at,
        pvz_id=reception.pvz_id,
        status=reception.status,
    )


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        created_at=product.created_at,
        type=product.type,
        reception_id=product.reception_id,
    )


@router.post("/receptions", response_model=ReceptionResponse, status_code=status.HTTP_201_CREATED)
async def create_reception(
    data: ReceptionCreateRequest,
    auth_user: CurrentUser,
    receptions: Receptions,
) -> ReceptionResponse:
    """접수 생성 — 직원 전용 (Open a reception; employees only)."""
    try:
        reception = await receptions.create(auth_user, data.pvz_id)
    except AuthorizationError as exc:
        raise ForbiddenError() from exc
    except AppError as exc:
        raise BadRequestError("Неверный запрос или есть незакрытая приемка") from exc
    return reception_to_response(reception)


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreateRequest,
    auth_user: CurrentUser,
    receptions: Receptions,
) -> ProductResponse:
    """상품 추가 — 진행 중 접수에 추가 (Add a product to the active reception)."""
    try:
        product = await receptions.create_product(auth_user, data.pvz_id, data.type)
    except AuthorizationError as exc:
        raise ForbiddenError() from exc
    except AppError as exc:
        raise BadRequestError("Неверный запрос или нет активной приемки") from exc
    return product_to_response(product)
