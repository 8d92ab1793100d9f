"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
``Base.metadata.create_all``.

Modules:
    pvz: 픽업 포인트 (PVZ, City)
    reception: 접수 및 상품 (Reception, Product and their enums)
    user: 사용자 (User, UserRole)
"""

from app.models.pvz import PVZ, City
from app.models.reception import Product, ProductType, Reception, ReceptionStatus
from app.models.user import User, UserRole

__all__ = [
    "PVZ", "City",
    "Reception", "ReceptionStatus",
    "Product", "ProductType",
    "User", "UserRole",
]
