"""
情绪评分服务类
负责评分的失效删除和分析写入，日记服务与补齐任务共用同一写入路径
"""
# 标准库导包
import logging
from typing import Optional

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from exceptions import AnalysisError
from llm.client import LLMClient
from llm.schemas import MoodAnalysis
from storage.models.rating import Rating
from storage.repositories.rating_repository import RatingRepository

# 配置日志
logger = logging.getLogger(__name__)


class RatingService:
    """情绪评分服务类"""

    def __init__(self, session: AsyncSession, llm_client: LLMClient):
        """
        初始化评分服务

        Args:
            session: 数据库会话
            llm_client: LLM客户端
        """
        self.session = session
        self.llm_client = llm_client
        self.rating_repo = RatingRepository(session)

    async def invalidate(self, entry_id: int) -> bool:
        """
        删除条目的评分及其主导情绪，并立即flush，保证之后可以重新创建

        Args:
            entry_id: 条目ID

        Returns:
            是否删除了已有评分
        """
        deleted = await self.rating_repo.delete_by_entry_id(entry_id)
        await self.session.flush()
        if deleted:
            logger.info(f"评分已失效并删除: entry_id={entry_id}")
        return deleted > 0

    async def analyze(self, text: str) -> MoodAnalysis:
        """
        调用分析服务，失败时向上抛出

        Raises:
            ProviderUnavailableError: 分析服务不可用
            InvalidAnalysisError: 分析结果不符合契约
        """
        return await self.llm_client.analyze_mood(text)

    async def store(self, entry_id: int, analysis: MoodAnalysis) -> Rating:
        """
        写入评分及其全部主导情绪

        Raises:
            IntegrityError: 条目已有评分
        """
        rating = await self.rating_repo.create_with_emotions(
            entry_id=entry_id,
            overall_mood_score=analysis.overall_mood_score,
            energy_level=analysis.energy_level,
            emotional_complexity=analysis.emotional_complexity,
            emotions=analysis.dominant_emotions,
        )
        logger.info(
            f"评分写入成功: entry_id={entry_id}, mood={analysis.overall_mood_score}, "
            f"emotions={analysis.dominant_emotions}"
        )
        return rating

    async def try_analyze(self, text: str, entry_id: Optional[int] = None) -> Optional[MoodAnalysis]:
        """
        尽力而为地分析文本，分析失败只记录日志，不影响条目本身的写入

        Args:
            text: 条目纯文本
            entry_id: 条目ID，仅用于日志，新建条目时为None

        Returns:
            MoodAnalysis；文本为空或分析失败时返回None
        """
        if not text or not text.strip():
            logger.info(f"条目纯文本为空，跳过情绪分析: entry_id={entry_id}")
            return None

        try:
            return await self.analyze(text)
        except AnalysisError as e:
            logger.warning(f"情绪分析失败，条目将保持无评分: entry_id={entry_id}, kind={e.kind}, error={e.message}")
            return None

    async def analyze_and_store(self, entry_id: int, text: str) -> Optional[Rating]:
        """
        为已存在的条目生成并写入评分

        Returns:
            新的Rating；文本为空或分析失败时返回None
        """
        analysis = await self.try_analyze(text, entry_id=entry_id)
        if analysis is None:
            return None
        return await self.store(entry_id, analysis)
