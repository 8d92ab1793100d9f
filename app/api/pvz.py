"""PVZ 라우터 — PVZ 등록/조회, 접수 종료, 마지막 상품 삭제.

PVZ Router — Register and list PVZs, the nested search, and the per-PVZ
reception actions (close the active reception, delete its last product).
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from app.api.deps import CurrentUser, PVZs, Receptions
from app.api.receptions import product_to_response, reception_to_response
from app.models.pvz import PVZ
from app.schemas.pvz import (
    PVZCreateRequest,
    PVZReceptionsResponse,
    PVZResponse,
    ReceptionProductsResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.reception import ReceptionResponse
from app.utils.exceptions import AppError, AuthorizationError, BadRequestError, ForbiddenError

router: APIRouter = APIRouter(
    prefix="/pvz",
    tags=["PVZ"],
    responses={400: {"model": MessageResponse}, 403: {"model": MessageResponse}},
)


def pvz_to_response(pvz: PVZ) -> PVZResponse:
    return PVZResponse(id=pvz.id, city=pvz.city, registered_at=pvz.registered_at)


@router.post("", response_model=PVZResponse, status_code=status.HTTP_201_CREATED)
async def create_pvz(data: PVZCreateRequest, auth_user: CurrentUser, pvzs: PVZs) -> PVZResponse:
    """PVZ 등록 (Register a PVZ; moderators only unless the role check is disabled)."""
    try:
        pvz = await pvzs.create(auth_user, data.city)
    except AuthorizationError as exc:
        raise ForbiddenError() from exc
    except AppError as exc:
        raise BadRequestError() from exc
    return pvz_to_response(pvz)


@router.get("", response_model=list[PVZReceptionsResponse])
async def search_pvz(
    pvzs: PVZs,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
    page: int | None = None,
    limit: int | None = None,
) -> list[PVZReceptionsResponse]:
    """기간 내 상품 기준 PVZ/접수/상품 조회.

    Nested search: PVZs with the receptions and products whose products
    were created between startDate and endDate (inclusive), paginated over
    products with a zero-based page.
    """
    try:
        items = await pvzs.find_pvz_reception_products(start_date, end_date, page, limit)
    except AppError as exc:
        raise BadRequestError() from exc

    return [
        PVZReceptionsResponse(
            pvz=pvz_to_response(item.pvz),
            receptions=[
                ReceptionProductsResponse(
                    reception=reception_to_response(entry.reception),
                    products=[product_to_response(p) for p in entry.products],
                )
                for entry in item.receptions
            ],
        )
        for item in items
    ]


@router.get("/list", response_model=list[PVZResponse])
async def list_pvz(pvzs: PVZs) -> list[PVZResponse]:
    """등록된 모든 PVZ 목록 (Every registered PVZ, oldest first)."""
    try:
        return [pvz_to_response(pvz) for pvz in await pvzs.find_all()]
    except AppError as exc:
        raise BadRequestError() from exc


@router.post("/{pvz_id}/close_last_reception", response_model=ReceptionResponse)
async def close_last_reception(
    pvz_id: str,
    auth_user: CurrentUser,
    receptions: Receptions,
) -> ReceptionResponse:
    """진행 중 접수 종료 — 직원 전용 (Close the active reception; employees only)."""
    try:
        reception = await receptions.close(auth_user, pvz_id)
    except AuthorizationError as exc:
        raise ForbiddenError() from exc
    except AppError as exc:
        raise BadRequestError("Неверный запрос или приемка уже закрыта") from exc
    return reception_to_response(reception)


@router.post("/{pvz_id}/delete_last_product", response_class=Response)
async def delete_last_product(
    pvz_id: str,
    auth_user: CurrentUser,
    receptions: Receptions,
) -> Response:
    """마지막 상품 삭제 — LIFO (Remove the newest product of the active reception)."""
    try:
        await receptions.delete_last_product(auth_user, pvz_id)
    except AuthorizationError as exc:
        raise ForbiddenError() from exc
    except AppError as exc:
        raise BadRequestError(
            "Неверный запрос, нет активной приемки или нет товаров для удаления"
        ) from exc
    return Response(status_code=status.HTTP_200_OK)
