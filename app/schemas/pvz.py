"""PVZ 관련 Pydantic 요청/응답 스키마 정의.

PVZ request/response schemas, including the nested search result
``[{pvz, receptions: [{reception, products}]}]``. JSON field names are
camelCase through serialization aliases.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.pvz import City
from app.schemas.reception import ProductResponse, ReceptionResponse


class PVZCreateRequest(BaseModel):
    """PVZ 생성 요청 스키마 (PVZ creation request)."""

    # 역할 검사 후 서비스에서 검증 — validated by the service after the role check
    city: str = Field(json_schema_extra={"enum": [c.value for c in City]})


class PVZResponse(BaseModel):
    """PVZ 응답 스키마.

    Attributes:
        id: PVZ UUID
        city: 도시 (City)
        registered_at: 등록 일시, JSON에서는 registrationDate
            (Registration time, ``registrationDate`` on the wire)
    """

    id: UUID
    city: City
    registered_at: datetime = Field(serialization_alias="registrationDate")


class ReceptionProductsResponse(BaseModel):
    """접수와 상품 목록 (A reception with its products)."""

    reception: ReceptionResponse
    products: list[ProductResponse] = []


class PVZReceptionsResponse(BaseModel):
    """PVZ 검색 결과 항목 (One item of the GET /pvz result)."""

    pvz: PVZResponse
    receptions: list[ReceptionProductsResponse] = []
