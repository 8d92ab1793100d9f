"""사용자 레포지토리 — 사용자 생성, 이메일 조회, 토큰 갱신.

User Repository — Insert, lookup by email and token update queries.
"""

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository
from app.utils.exceptions import NotFoundError, StorageError


class UserNotFoundError(NotFoundError):
    message = "user not found"


class UserRepositoryError(StorageError):
    message = "users repository error"


class UserInsertError(UserRepositoryError):
    message = "users repository error: create failed"


class UserReadError(UserRepositoryError):
    message = "users repository error: read failed"


class UserUpdateTokenError(UserRepositoryError):
    message = "users repository error: update token by email failed"


class UserRepository(BaseRepository[User]):
    """users 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def create(self, db: AsyncSession, user: User) -> User:
        """사용자를 저장합니다. 이메일 중복 시 실패합니다.

        Insert a user. Fails with UserInsertError on a duplicate email.
        """
        try:
            return await self.insert(
                db,
                {
                    "id": user.id,
                    "email": user.email,
                    "role": user.role,
                    "password_hash": user.password_hash,
                    "token": user.token,
                },
            )
        except SQLAlchemyError as exc:
            raise UserInsertError() from exc

    async def read_by_email(self, db: AsyncSession, email: str) -> User:
        """이메일로 사용자를 조회합니다.

        Raises:
            UserReadError: 조회 실패, 또는 사용자가 없을 때 (chained from UserNotFoundError)
        """
        query: Select = select(User).where(User.email == email)
        try:
            result = await db.execute(query)
            user: User | None = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise UserReadError() from exc

        if user is None:
            raise UserReadError() from UserNotFoundError(email)
        return user

    async def update_token_by_email(self, db: AsyncSession, email: str, token: str) -> None:
        """사용자의 현재 토큰을 갱신합니다 (Store a freshly issued token)."""
        statement = (
            update(User)
            .where(User.email == email)
            .values(token=token)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as exc:
            raise UserUpdateTokenError() from exc

        if result.rowcount == 0:
            raise UserUpdateTokenError() from UserNotFoundError(email)


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
