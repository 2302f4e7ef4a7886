"""
日记路由
提供日记条目的创建、查询、修改、删除等API接口
"""
# 标准库导包
import logging
from typing import Optional

# 第三方库导包
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from exceptions import JournalError
from llm.client import LLMClient, get_llm_client
from models import (
    Identity,
    CreateEntryRequest,
    UpdateEntryRequest,
    EntryResponse,
    EntryDetailResponse,
    EntryListResponse,
    EntrySummaryResponse,
    RatingResponse,
)
from routers.services.journal_service import JournalService
from storage.database import get_session
from utils import get_current_identity

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/entries",
    tags=["日记记录"]
)


def _entry_to_response(entry) -> EntryResponse:
    """
    将Entry模型转换为EntryResponse

    Args:
        entry: 已加载评分和提及的Entry模型实例

    Returns:
        EntryResponse对象
    """
    rating = None
    if entry.rating is not None:
        rating = RatingResponse(
            overall_mood_score=entry.rating.overall_mood_score,
            energy_level=entry.rating.energy_level,
            emotional_complexity=entry.rating.emotional_complexity,
            dominant_emotions=entry.rating.emotions,
            created_at=entry.rating.created_at
        )

    return EntryResponse(
        id=entry.id,
        author_id=entry.author_id,
        content=entry.content,
        text_content=entry.text_content,
        entry_date=entry.entry_date,
        mentions=[mention.person_id for mention in entry.mentions],
        rating=rating,
        created_at=entry.created_at
    )


@router.post(
    "",
    response_model=EntryDetailResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_by_alias=True,
    summary="创建日记"
)
async def create_entry(
    request: CreateEntryRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """
    创建日记条目

    - **content**: 富文本内容（HTML）
    - **mentions**: 可选，提及的联系人ID列表，必须全部属于当前用户
    - **date**: 可选，日记日期 YYYY-MM-DD，默认为今天

    情绪评分尽力生成，分析失败时条目照常创建，rating为null
    """
    try:
        journal_service = JournalService(session, llm_client)
        entry = await journal_service.create_entry(
            identity=identity,
            content=request.content,
            mentions=request.mentions,
            entry_date=request.entry_date
        )

        return EntryDetailResponse(
            message="创建成功",
            data=_entry_to_response(entry)
        )

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"创建日记失败: {str(e)}")
        raise JournalError("创建日记失败") from e


@router.get("", response_model=EntryListResponse, response_model_by_alias=True, summary="获取日历视图条目列表")
async def list_entries(
    month: Optional[int] = Query(None, description="月份 1-12，默认当前月"),
    year: Optional[int] = Query(None, description="年份，默认当前年"),
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """
    获取所选月份及其前后各一个月的条目ID和日期
    """
    try:
        journal_service = JournalService(session, llm_client)
        rows = await journal_service.list_entries(identity=identity, month=month, year=year)

        data = [EntrySummaryResponse(id=entry_id, entry_date=entry_date) for entry_id, entry_date in rows]
        return EntryListResponse(data=data, total=len(data))

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"获取条目列表失败: {str(e)}")
        raise JournalError("获取条目列表失败") from e


@router.get("/{entry_id}", response_model=EntryDetailResponse, response_model_by_alias=True, summary="获取日记详情")
async def get_entry(
    entry_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """获取日记详情，包含情绪评分和提及的联系人"""
    try:
        journal_service = JournalService(session, llm_client)
        entry = await journal_service.get_entry(entry_id, identity)
        return EntryDetailResponse(data=_entry_to_response(entry))

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"获取日记详情失败: entry_id={entry_id}, error={str(e)}")
        raise JournalError("获取日记详情失败") from e


@router.patch("/{entry_id}", response_model=EntryDetailResponse, response_model_by_alias=True, summary="修改日记")
async def update_entry(
    entry_id: int,
    request: UpdateEntryRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """
    修改日记，未提供的字段保持不变

    纯文本发生变化时旧评分会被删除并重新分析；只修改日期或提及时评分保持不变
    """
    try:
        journal_service = JournalService(session, llm_client)
        entry = await journal_service.update_entry(
            entry_id=entry_id,
            identity=identity,
            content=request.content,
            mentions=request.mentions,
            entry_date=request.entry_date
        )

        return EntryDetailResponse(
            message="修改成功",
            data=_entry_to_response(entry)
        )

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"修改日记失败: entry_id={entry_id}, error={str(e)}")
        raise JournalError("修改日记失败") from e


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary="删除日记")
async def delete_entry(
    entry_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """删除日记，同时删除其评分、主导情绪和提及关联"""
    try:
        journal_service = JournalService(session, llm_client)
        await journal_service.delete_entry(entry_id, identity)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"删除日记失败: entry_id={entry_id}, error={str(e)}")
        raise JournalError("删除日记失败") from e
