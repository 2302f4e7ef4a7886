"""
RatingRepository - 情绪评分Repository
"""
# 标准库导包
from typing import Sequence

# 第三方库导包
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from storage.models.rating import Rating, RatingEmotion
from storage.repositories.base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    """情绪评分Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Rating)

    async def create_with_emotions(
        self,
        entry_id: int,
        overall_mood_score: int,
        energy_level: int,
        emotional_complexity: int,
        emotions: Sequence[str]
    ) -> Rating:
        """
        创建评分及其全部主导情绪，作为一次flush写入

        Args:
            entry_id: 条目ID
            overall_mood_score: 整体情绪分
            energy_level: 能量水平
            emotional_complexity: 情绪复杂度
            emotions: 主导情绪列表

        Returns:
            创建的Rating实例

        Raises:
            IntegrityError: 条目已存在评分时由唯一约束抛出
        """
        rating = Rating(
            entry_id=entry_id,
            overall_mood_score=overall_mood_score,
            energy_level=energy_level,
            emotional_complexity=emotional_complexity,
            dominant_emotions=[RatingEmotion(emotion=emotion) for emotion in emotions],
        )
        self.session.add(rating)
        await self.session.flush()
        return rating

    async def delete_by_entry_id(self, entry_id: int) -> int:
        """
        删除条目的评分及其主导情绪

        Args:
            entry_id: 条目ID

        Returns:
            删除的评分数量
        """
        rating_ids = select(Rating.id).where(Rating.entry_id == entry_id).scalar_subquery()
        await self.session.execute(
            delete(RatingEmotion).where(RatingEmotion.rating_id.in_(rating_ids))
        )
        result = await self.session.execute(
            delete(Rating).where(Rating.entry_id == entry_id)
        )
        return result.rowcount
