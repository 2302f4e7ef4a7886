"""
数据模型定义
"""
# 标准库导包
import re
from typing import Optional, Dict, Any, List
from datetime import datetime, date

# 第三方库导包
from pydantic import BaseModel, ConfigDict, Field, field_validator

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_entry_date(value: Any) -> Optional[date]:
    """
    解析 YYYY-MM-DD 格式的日期字符串

    Raises:
        ValueError: 格式不正确或不是合法日期
    """
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.fullmatch(value):
        raise ValueError("日期格式必须为YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError("日期不存在")


class Identity(BaseModel):
    """已认证用户身份，显式传入每个业务调用"""
    user_id: int
    email: str


# ========== 认证相关模型 ==========

class DevSessionRequest(BaseModel):
    """开发环境创建会话请求模型"""
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=50)


class SessionResponse(BaseModel):
    """会话响应模型"""
    success: bool = True
    message: str = "登录成功"
    token: str
    identity: Identity


class IdentityResponse(BaseModel):
    """当前用户响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: Identity


class MessageResponse(BaseModel):
    """通用消息响应模型"""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """错误响应模型"""
    success: bool = False
    error: str = Field(..., description="稳定的错误类型，如 NotFound/Forbidden/ValidationError")
    message: str
    details: List[Dict[str, Any]] = Field(default_factory=list)


# ========== Journal模块相关模型 ==========

class _EntryPayload(BaseModel):
    """条目请求公共字段校验"""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("mentions", check_fields=False)
    @classmethod
    def _dedupe_mentions(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return value
        if any(person_id <= 0 for person_id in value):
            raise ValueError("联系人ID必须为正整数")
        return list(dict.fromkeys(value))

    @field_validator("entry_date", mode="before", check_fields=False)
    @classmethod
    def _check_date(cls, value: Any) -> Optional[date]:
        return parse_entry_date(value)


class CreateEntryRequest(_EntryPayload):
    """创建条目请求模型"""
    content: str = Field(..., min_length=1, description="富文本内容（HTML）")
    mentions: Optional[List[int]] = Field(None, min_length=1, description="提及的联系人ID列表")
    entry_date: Optional[date] = Field(None, alias="date", description="日记日期，格式：YYYY-MM-DD，默认为今天")


class UpdateEntryRequest(_EntryPayload):
    """更新条目请求模型，未提供的字段保持不变"""
    content: Optional[str] = Field(None, min_length=1, description="富文本内容（HTML）")
    mentions: Optional[List[int]] = Field(None, min_length=1, description="提及的联系人ID列表，整体替换")
    entry_date: Optional[date] = Field(None, alias="date", description="日记日期，格式：YYYY-MM-DD")


class RatingResponse(BaseModel):
    """情绪评分响应模型"""
    overall_mood_score: int
    energy_level: int
    emotional_complexity: int
    dominant_emotions: List[str]
    created_at: datetime


class EntryResponse(BaseModel):
    """条目响应模型"""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    author_id: int
    content: str
    text_content: str
    entry_date: date = Field(..., alias="date")
    mentions: List[int] = Field(default_factory=list, description="提及的联系人ID")
    rating: Optional[RatingResponse] = None
    created_at: datetime


class EntryDetailResponse(BaseModel):
    """条目详情响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: EntryResponse


class EntrySummaryResponse(BaseModel):
    """条目列表项（日历视图）"""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    entry_date: date = Field(..., alias="date")


class EntryListResponse(BaseModel):
    """条目列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[EntrySummaryResponse]
    total: int


# ========== Person模块相关模型 ==========

class CreatePersonRequest(BaseModel):
    """创建联系人请求模型"""
    name: str = Field(..., min_length=1, max_length=50)
    surname: str = Field(..., min_length=1, max_length=50)
    nickname: Optional[str] = Field(None, max_length=50)


class PersonResponse(BaseModel):
    """联系人响应模型"""
    id: int
    name: str
    surname: str
    nickname: Optional[str] = None
    created_at: datetime


class PersonDetailResponse(BaseModel):
    """联系人详情响应模型"""
    success: bool = True
    message: str = "创建成功"
    data: PersonResponse


class PersonListResponse(BaseModel):
    """联系人列表响应模型"""
    success: bool = True
    message: str = "获取成功"
    data: List[PersonResponse]
    total: int


# ========== 评分补齐任务相关模型 ==========

class BackfillReport(BaseModel):
    """评分补齐任务执行结果"""
    selected: int = 0
    rated: int = 0
    skipped: int = 0
    failed: int = 0
    failed_entry_ids: List[int] = Field(default_factory=list)
