"""
日记服务类
处理日记条目的创建、查询、更新、删除，以及内容变化时的评分失效与重新分析
"""
# 标准库导包
import logging
from datetime import date
from typing import Optional, List, Sequence, Tuple

# 第三方库导包
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from exceptions import (
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    RequestValidationFailed,
)
from llm.client import LLMClient
from models import Identity
from redis_client import acquire_lock, release_lock
from routers.services.rating_policy import should_invalidate
from routers.services.rating_service import RatingService
from storage.models.entry import Entry
from storage.repositories.entry_repository import EntryRepository
from storage.repositories.mention_repository import MentionRepository
from storage.repositories.person_repository import PersonRepository
from utils.html_text import html_to_text

# 配置日志
logger = logging.getLogger(__name__)

MIN_LIST_YEAR = 2000


def _shift_month(year: int, month: int, delta: int) -> date:
    """返回(year, month)平移delta个月后那个月的1号"""
    index = year * 12 + (month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


class JournalService:
    """日记服务类"""

    def __init__(self, session: AsyncSession, llm_client: LLMClient):
        """
        初始化日记服务

        Args:
            session: 数据库会话
            llm_client: LLM客户端
        """
        self.session = session
        self.entry_repo = EntryRepository(session)
        self.person_repo = PersonRepository(session)
        self.mention_repo = MentionRepository(session)
        self.rating_service = RatingService(session, llm_client)

    @staticmethod
    def _require_identity(identity: Optional[Identity]) -> Identity:
        if identity is None:
            raise UnauthorizedError()
        return identity

    async def _get_owned_entry(self, entry_id: int, identity: Identity) -> Entry:
        """
        获取条目并校验作者

        Raises:
            NotFoundError: 条目不存在
            ForbiddenError: 当前用户不是作者
        """
        entry = await self.entry_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError(f"条目不存在: {entry_id}")
        if entry.author_id != identity.user_id:
            logger.warning(f"越权访问条目: entry_id={entry_id}, user_id={identity.user_id}")
            raise ForbiddenError("无权访问该条目")
        return entry

    async def _check_mentions(self, identity: Identity, person_ids: Sequence[int]) -> None:
        """
        校验提及的联系人全部属于当前用户，任意一个不满足则整体拒绝

        Raises:
            ForbiddenError: 存在不属于当前用户或不存在的联系人
        """
        if not person_ids:
            return

        persons = await self.person_repo.get_by_ids(person_ids)
        owned_ids = {person.id for person in persons if person.owner_id == identity.user_id}
        rejected = [person_id for person_id in person_ids if person_id not in owned_ids]
        if rejected:
            logger.warning(f"提及校验失败: user_id={identity.user_id}, rejected={rejected}")
            raise ForbiddenError(
                "不能提及不属于自己的联系人",
                details=[{"field": "mentions", "message": "联系人不存在或不属于当前用户", "person_ids": rejected}],
            )

    async def _ensure_date_free(self, author_id: int, entry_date: date) -> None:
        existing = await self.entry_repo.get_by_author_and_date(author_id, entry_date)
        if existing is not None:
            raise ConflictError(
                f"{entry_date.isoformat()} 已存在日记",
                details=[{"field": "date", "message": "每天只能有一条日记", "entry_id": existing.id}],
            )

    async def _flush(self) -> None:
        """flush写入，唯一约束冲突（并发写入同一天）转换为ConflictError"""
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"条目写入违反唯一约束: {str(e.orig)}")
            raise ConflictError("该日期已存在日记") from e

    async def create_entry(
        self,
        identity: Optional[Identity],
        content: str,
        mentions: Optional[List[int]] = None,
        entry_date: Optional[date] = None
    ) -> Entry:
        """
        创建条目，并尽力生成情绪评分

        Args:
            identity: 当前用户
            content: 富文本内容
            mentions: 提及的联系人ID列表
            entry_date: 日记日期，默认为今天

        Returns:
            包含评分和提及的Entry

        Raises:
            UnauthorizedError: 未登录
            ForbiddenError: 提及了不属于自己的联系人
            ConflictError: 当天已有日记
        """
        identity = self._require_identity(identity)
        await self._check_mentions(identity, mentions or [])

        entry_date = entry_date or date.today()
        await self._ensure_date_free(identity.user_id, entry_date)

        text_content = html_to_text(content)

        # 先分析再写入，分析期间不持有写事务
        analysis = await self.rating_service.try_analyze(text_content)

        entry = Entry(
            author_id=identity.user_id,
            content=content,
            text_content=text_content,
            entry_date=entry_date,
        )
        self.session.add(entry)
        await self._flush()

        if mentions:
            await self.mention_repo.replace_entry_mentions(entry.id, mentions)
        if analysis is not None:
            await self.rating_service.store(entry.id, analysis)

        logger.info(
            f"创建条目成功: entry_id={entry.id}, user_id={identity.user_id}, "
            f"date={entry_date}, rated={analysis is not None}"
        )
        return await self.entry_repo.get_with_relations(entry.id)

    async def update_entry(
        self,
        entry_id: int,
        identity: Optional[Identity],
        content: Optional[str] = None,
        mentions: Optional[List[int]] = None,
        entry_date: Optional[date] = None
    ) -> Entry:
        """
        更新条目，纯文本变化时删除旧评分并重新分析

        同一条目的更新通过Redis锁串行执行，锁内提交事务后再释放。

        Args:
            entry_id: 条目ID
            identity: 当前用户
            content: 新的富文本内容，None表示不修改
            mentions: 新的提及联系人集合（整体替换），None表示不修改
            entry_date: 新的日期，None表示不修改

        Returns:
            更新后的Entry

        Raises:
            UnauthorizedError: 未登录
            NotFoundError: 条目不存在
            ForbiddenError: 不是作者，或提及了不属于自己的联系人
            ConflictError: 条目正在被其他请求修改，或新日期已有日记
        """
        identity = self._require_identity(identity)

        lock = await acquire_lock(
            f"{settings.REDIS_KEY_PREFIXES['ENTRY_LOCK']}{entry_id}",
            timeout=settings.ENTRY_LOCK_TIMEOUT,
            blocking_timeout=settings.ENTRY_LOCK_BLOCKING_TIMEOUT,
        )
        if lock is None:
            raise ConflictError("条目正在被修改，请稍后重试")

        try:
            entry = await self._get_owned_entry(entry_id, identity)

            if mentions is not None:
                await self._check_mentions(identity, mentions)
            if entry_date is not None and entry_date != entry.entry_date:
                await self._ensure_date_free(identity.user_id, entry_date)

            new_text = html_to_text(content) if content is not None else None
            invalidated = should_invalidate(entry.text_content, new_text)

            # 旧评分必须先删除，才能写入新评分
            if invalidated:
                await self.rating_service.invalidate(entry.id)
            # 提及替换会自行flush，需在修改条目字段之前完成
            if mentions is not None:
                await self.mention_repo.replace_entry_mentions(entry.id, mentions)

            if content is not None:
                entry.content = content
                entry.text_content = new_text
            if entry_date is not None:
                entry.entry_date = entry_date
            await self._flush()

            rated = False
            if invalidated:
                rated = await self.rating_service.analyze_and_store(entry.id, new_text) is not None

            await self.session.commit()
            logger.info(
                f"更新条目成功: entry_id={entry.id}, invalidated={invalidated}, rated={rated}"
            )
        finally:
            await release_lock(lock)

        return await self.entry_repo.get_with_relations(entry_id)

    async def delete_entry(self, entry_id: int, identity: Optional[Identity]) -> None:
        """
        删除条目，评分、主导情绪和提及关联由外键级联删除

        Raises:
            UnauthorizedError: 未登录
            NotFoundError: 条目不存在
            ForbiddenError: 不是作者
        """
        identity = self._require_identity(identity)
        entry = await self._get_owned_entry(entry_id, identity)

        await self.entry_repo.delete_by_id(entry.id)
        await self.session.flush()
        logger.info(f"删除条目成功: entry_id={entry_id}, user_id={identity.user_id}")

    async def get_entry(self, entry_id: int, identity: Optional[Identity]) -> Entry:
        """
        获取条目详情

        Raises:
            UnauthorizedError: 未登录
            NotFoundError: 条目不存在
            ForbiddenError: 不是作者
        """
        identity = self._require_identity(identity)
        entry = await self.entry_repo.get_with_relations(entry_id)
        if entry is None:
            raise NotFoundError(f"条目不存在: {entry_id}")
        if entry.author_id != identity.user_id:
            raise ForbiddenError("无权访问该条目")
        return entry

    async def list_entries(
        self,
        identity: Optional[Identity],
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> List[Tuple[int, date]]:
        """
        获取日历视图的条目列表

        返回上个月1号（包含）到下下个月1号（不包含）之间的条目，即所选月份及前后各一个月。

        Args:
            identity: 当前用户
            month: 月份1-12，默认当前月
            year: 年份，默认当前年

        Returns:
            (条目ID, 日期)列表

        Raises:
            UnauthorizedError: 未登录
            RequestValidationFailed: 月份或年份超出范围
        """
        identity = self._require_identity(identity)
        today = date.today()

        if month is None:
            month = today.month
        if year is None:
            year = today.year

        if not 1 <= month <= 12:
            raise RequestValidationFailed("月份必须在1到12之间", field="month")
        if not MIN_LIST_YEAR <= year <= today.year:
            raise RequestValidationFailed(f"年份必须在{MIN_LIST_YEAR}到{today.year}之间", field="year")

        start_date = _shift_month(year, month, -1)
        end_date = _shift_month(year, month, 2)
        return await self.entry_repo.list_dates_in_range(identity.user_id, start_date, end_date)
