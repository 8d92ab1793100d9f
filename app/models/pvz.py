"""PVZ(픽업 포인트) SQLAlchemy ORM 모델 정의.

Pickup point (PVZ) SQLAlchemy ORM model definitions.

Tables:
    - pvz: 픽업 포인트 (Pickup points, immutable after creation)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class City(str, enum.Enum):
    """PVZ를 개설할 수 있는 도시 (Cities where a PVZ may be registered)."""

    MOSCOW = "Москва"
    SAINT_PETERSBURG = "Санкт-Петербург"
    KAZAN = "Казань"


class PVZ(Base):
    """픽업 포인트 모델.

    Pickup point model. A PVZ owns its receptions; it is never updated
    after registration.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        city: 도시 (One of the City values)
        registered_at: 등록 일시 UTC (Registration timestamp)
    """

    __tablename__ = "pvz"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 도시 — City enum value stored as text
    city: Mapped[str] = mapped_column(String(64), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
