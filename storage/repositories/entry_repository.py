"""
EntryRepository - 日记条目Repository
"""
# 标准库导包
from datetime import date, datetime
from typing import Optional, List, Tuple

# 第三方库导包
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

# 项目内部导包
from storage.models.entry import Entry
from storage.models.rating import Rating
from storage.repositories.base import BaseRepository


class EntryRepository(BaseRepository[Entry]):
    """日记条目Repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Entry)

    async def get_with_relations(self, entry_id: int) -> Optional[Entry]:
        """
        获取条目，同时加载评分、主导情绪和提及的联系人

        Args:
            entry_id: 条目ID

        Returns:
            Entry实例或None
        """
        query = (
            select(Entry)
            .where(Entry.id == entry_id)
            .options(
                selectinload(Entry.rating).selectinload(Rating.dominant_emotions),
                selectinload(Entry.mentions),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_author_and_date(self, author_id: int, entry_date: date) -> Optional[Entry]:
        """
        获取作者某一天的条目

        Args:
            author_id: 作者ID
            entry_date: 日记日期

        Returns:
            Entry实例或None
        """
        results = await self.query_by_filters(
            filters={"author_id": author_id, "entry_date": entry_date},
            limit=1
        )
        return results[0] if results else None

    async def list_dates_in_range(
        self,
        author_id: int,
        start_date: date,
        end_date: date
    ) -> List[Tuple[int, date]]:
        """
        获取作者在日期区间内的条目ID和日期

        Args:
            author_id: 作者ID
            start_date: 开始日期（包含）
            end_date: 结束日期（不包含）

        Returns:
            (条目ID, 日期)列表，按日期升序
        """
        query = (
            select(Entry.id, Entry.entry_date)
            .where(
                and_(
                    Entry.author_id == author_id,
                    Entry.entry_date >= start_date,
                    Entry.entry_date < end_date,
                )
            )
            .order_by(Entry.entry_date.asc())
        )
        result = await self.session.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def get_unrated_since(self, since: datetime, limit: Optional[int] = None) -> List[Entry]:
        """
        获取指定时间之后创建且尚无评分的条目

        Args:
            since: 创建时间下限（包含）
            limit: 限制返回数量

        Returns:
            Entry列表，按创建时间升序
        """
        query = (
            select(Entry)
            .outerjoin(Rating, Rating.entry_id == Entry.id)
            .where(
                and_(
                    Entry.created_at >= since,
                    Rating.id.is_(None),
                )
            )
            .order_by(Entry.created_at.asc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
