"""사용자 레포지토리 — 로그인 및 직공 목록 조회.

User Repository — Login lookup and weaver listing queries.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.user import ROLE_WEAVER, User
from loomtrack.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일로 사용자를 조회합니다 (대소문자 무시).

        Retrieve a user by email, case-insensitively.
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_weavers(self, db: AsyncSession, active_only: bool = True) -> Sequence[User]:
        """직공 목록을 이름순으로 조회합니다.

        Retrieve weavers ordered by name.
        """
        query = select(User).where(User.role == ROLE_WEAVER)
        if active_only:
            query = query.where(User.is_active.is_(True))
        result = await db.execute(query.order_by(User.name))
        return result.scalars().all()

    async def get_names(self, db: AsyncSession, user_ids: set) -> dict:
        """여러 사용자의 이름을 한 번에 조회합니다.

        Bulk-resolve user names for response enrichment.

        Returns:
            dict: {user_id: name}
        """
        if not user_ids:
            return {}
        result = await db.execute(select(User.id, User.name).where(User.id.in_(user_ids)))
        return {row.id: row.name for row in result.all()}


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
