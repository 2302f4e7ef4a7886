"""
PersonRepository - 联系人Repository
"""
# 标准库导包
from typing import List

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.person import Person
from storage.repositories.base import BaseRepository


class PersonRepository(BaseRepository[Person]):
    """联系人Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Person)

    async def get_by_owner_id(self, owner_id: int) -> List[Person]:
        """
        获取用户的全部联系人

        Args:
            owner_id: 所属用户ID

        Returns:
            联系人列表，按创建时间升序
        """
        return await self.query_by_filters(
            filters={"owner_id": owner_id},
            order_by="created_at",
            order_desc=False
        )
