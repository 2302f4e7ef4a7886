"""
MentionRepository - 日记提及关联Repository
"""
# 标准库导包
from typing import List, Sequence

# 第三方库导包
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.mention import Mention
from storage.repositories.base import BaseRepository


class MentionRepository(BaseRepository[Mention]):
    """日记提及关联Repository，Mention使用(entry_id, person_id)联合主键"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Mention)

    async def replace_entry_mentions(self, entry_id: int, person_ids: Sequence[int]) -> List[Mention]:
        """
        用新的联系人集合替换条目的全部提及

        Args:
            entry_id: 条目ID
            person_ids: 新的联系人ID列表

        Returns:
            新的提及关联列表
        """
        await self.session.execute(
            delete(Mention).where(Mention.entry_id == entry_id)
        )

        mentions = [Mention(entry_id=entry_id, person_id=person_id) for person_id in person_ids]
        self.session.add_all(mentions)
        await self.session.flush()
        return mentions
