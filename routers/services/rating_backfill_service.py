"""
情绪评分补齐服务类
定期扫描近期仍无评分的条目并逐条补齐，单条失败不影响其余条目
"""
# 标准库导包
import logging
from datetime import datetime, timedelta
from typing import Optional

# 第三方库导包
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from exceptions import AnalysisError
from llm.client import LLMClient
from models import BackfillReport
from redis_client import acquire_lock, release_lock
from routers.services.rating_service import RatingService
from storage.repositories.entry_repository import EntryRepository

# 配置日志
logger = logging.getLogger(__name__)

BACKFILL_LOCK_NAME = "rating_backfill"


class RatingBackfillService:
    """情绪评分补齐服务类"""

    def __init__(self, session: AsyncSession, llm_client: LLMClient):
        """
        初始化补齐服务

        Args:
            session: 数据库会话，由调用方负责提交
            llm_client: LLM客户端
        """
        self.session = session
        self.entry_repo = EntryRepository(session)
        self.rating_service = RatingService(session, llm_client)

    async def run(self, now: Optional[datetime] = None) -> BackfillReport:
        """
        执行一轮补齐

        重复执行是幂等的：条目已被并发任务评分时，唯一约束冲突按跳过处理。
        本轮失败的条目不重试，仍无评分，下一轮会再次被选中。

        Args:
            now: 当前时间，默认datetime.utcnow()

        Returns:
            BackfillReport
        """
        now = now or datetime.utcnow()
        since = now - timedelta(days=settings.RATING_BACKFILL_WINDOW_DAYS)

        entries = await self.entry_repo.get_unrated_since(since)
        report = BackfillReport(selected=len(entries))
        logger.info(f"评分补齐开始: since={since.isoformat()}, selected={report.selected}")

        # 先取出需要的字段，SAVEPOINT回滚后不再访问ORM实例
        pending = [(entry.id, entry.text_content) for entry in entries]

        for entry_id, text in pending:
            if not text or not text.strip():
                report.skipped += 1
                continue

            try:
                analysis = await self.rating_service.analyze(text)
            except AnalysisError as e:
                logger.warning(f"评分补齐分析失败: entry_id={entry_id}, kind={e.kind}, error={e.message}")
                report.failed += 1
                report.failed_entry_ids.append(entry_id)
                continue

            # 每条评分在独立的SAVEPOINT中写入，冲突只回滚这一条
            try:
                async with self.session.begin_nested():
                    await self.rating_service.store(entry_id, analysis)
            except IntegrityError:
                logger.info(f"条目已有评分，跳过: entry_id={entry_id}")
                report.skipped += 1
                continue

            report.rated += 1

        logger.info(
            f"评分补齐完成: selected={report.selected}, rated={report.rated}, "
            f"skipped={report.skipped}, failed={report.failed}"
        )
        return report


async def run_backfill_once(session_factory, llm_client: LLMClient) -> Optional[BackfillReport]:
    """
    在分布式锁保护下执行一轮补齐，并提交结果

    Args:
        session_factory: async_sessionmaker
        llm_client: LLM客户端

    Returns:
        BackfillReport；其他进程正在执行时返回None
    """
    lock = await acquire_lock(
        f"{settings.REDIS_KEY_PREFIXES['TASK_LOCK']}{BACKFILL_LOCK_NAME}",
        timeout=settings.RATING_BACKFILL_LOCK_TIMEOUT,
        blocking_timeout=0,
    )
    if lock is None:
        logger.info("评分补齐正在其他进程中执行，本轮跳过")
        return None

    try:
        async with session_factory() as session:
            report = await RatingBackfillService(session, llm_client).run()
            await session.commit()
            return report
    finally:
        await release_lock(lock)
