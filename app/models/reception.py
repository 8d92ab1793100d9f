"""접수(Reception) 및 상품(Product) SQLAlchemy ORM 모델 정의.

Reception and Product SQLAlchemy ORM model definitions.

Tables:
    - receptions: PVZ별 입고 접수 세션 (Goods-intake sessions per PVZ)
    - products: 접수에 등록된 상품 (Products registered within a reception)

Constraints:
    uq_receptions_active_pvz: PVZ당 진행 중 접수는 최대 1개
        (Partial unique index: at most one in_progress reception per PVZ)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ReceptionStatus(str, enum.Enum):
    """접수 상태 (Reception status)."""

    IN_PROGRESS = "in_progress"
    CLOSE = "close"


class ProductType(str, enum.Enum):
    """상품 분류 (Product category)."""

    ELECTRONICS = "электроника"
    CLOTHES = "одежда"
    SHOES = "обувь"


class Reception(Base):
    """입고 접수 모델.

    Reception model. Created as in_progress, moved to close by an explicit
    close action, never deleted.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        pvz_id: 소속 PVZ FK (Owning pickup point)
        status: 상태 (in_progress | close)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "receptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    pvz_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("pvz.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ReceptionStatus.IN_PROGRESS.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index(
            "uq_receptions_active_pvz",
            "pvz_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )


class Product(Base):
    """상품 모델.

    Product model. Only the most recently created product of the active
    reception may be deleted.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        reception_id: 소속 접수 FK (Owning reception)
        type: 상품 분류 (ProductType value)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reception_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("receptions.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index("ix_products_reception_created", "reception_id", "created_at"),
        Index("ix_products_created_at", "created_at"),
    )
