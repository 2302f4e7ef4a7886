"""
UserRepository - 用户Repository
"""
# 标准库导包
from typing import Optional

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.user import User
from storage.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """用户Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        根据邮箱获取用户

        Args:
            email: 邮箱

        Returns:
            User实例或None
        """
        results = await self.query_by_filters(filters={"email": email}, limit=1)
        return results[0] if results else None
