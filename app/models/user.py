"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definitions.

Tables:
    - users: 사용자 계정 (User accounts with role and current auth token)
"""

import enum
import uuid

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class UserRole(str, enum.Enum):
    """사용자 역할 (User role)."""

    EMPLOYEE = "employee"
    MODERATOR = "moderator"


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model. Email is globally unique. The current bearer token is kept
    on the row and refreshed on login.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 이메일 (Unique login email)
        role: 역할 (employee | moderator)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        token: 현재 인증 토큰 (Current bearer token)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False)
