"""접수/상품 Pydantic 요청/응답 스키마 정의.

Reception and product request/response schemas. Request bodies accept the
camelCase names (``pvzId``) through validation aliases; responses emit
``dateTime``, ``pvzId`` and ``receptionId``.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.reception import ProductType, ReceptionStatus


class ReceptionCreateRequest(BaseModel):
    """접수 생성 요청 스키마 (Open a reception for a PVZ).

    pvzId stays a raw string here. The service parses it after the role
    check, so callers without access get 403 for any id.
    """

    pvz_id: str = Field(alias="pvzId")


class ProductCreateRequest(BaseModel):
    """상품 추가 요청 스키마 (Add a product to the PVZ's active reception)."""

    # 역할 검사 후 서비스에서 검증 — validated by the service after the role check
    type: str = Field(json_schema_extra={"enum": [t.value for t in ProductType]})
    pvz_id: str = Field(alias="pvzId")


class ReceptionResponse(BaseModel):
    """접수 응답 스키마.

    Attributes:
        id: 접수 UUID (Reception identifier)
        created_at: 생성 일시, JSON에서는 dateTime (``dateTime`` on the wire)
        pvz_id: PVZ UUID (``pvzId`` on the wire)
        status: 상태 (in_progress | close)
    """

    id: UUID
    created_at: datetime = Field(serialization_alias="dateTime")
    pvz_id: UUID = Field(serialization_alias="pvzId")
    status: ReceptionStatus


class ProductResponse(BaseModel):
    """상품 응답 스키마 (Product as returned to clients)."""

    id: UUID
    created_at: datetime = Field(serialization_alias="dateTime")
    type: ProductType
    reception_id: UUID = Field(serialization_alias="receptionId")
