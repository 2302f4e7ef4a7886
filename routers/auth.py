"""
认证路由
提供开发环境会话签发、登出和当前用户查询接口
"""
# 标准库导包
import logging
from datetime import datetime
from typing import Optional

# 第三方库导包
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

# 项目内部导包
from config import settings
from exceptions import JournalError, NotFoundError, UnauthorizedError
from models import (
    Identity,
    DevSessionRequest,
    SessionResponse,
    IdentityResponse,
    MessageResponse,
)
from routers.services.session_service import SessionService
from storage.database import get_session
from storage.repositories.user_repository import UserRepository
from utils import get_current_identity, extract_session_token

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由器
router = APIRouter(
    prefix="/auth",
    tags=["认证"]
)


@router.post("/dev-session", response_model=SessionResponse, summary="开发环境签发会话")
async def create_dev_session(
    request: DevSessionRequest,
    session: AsyncSession = Depends(get_session)
):
    """
    按邮箱查找或创建用户并签发会话，仅DEBUG模式可用

    正式的注册和登录流程不在本服务中实现
    """
    if not settings.DEBUG:
        raise NotFoundError("接口不存在")

    try:
        user_repo = UserRepository(session)
        user = await user_repo.get_by_email(request.email)
        if user is None:
            user = await user_repo.create(email=request.email, name=request.name)
            logger.info(f"开发环境创建用户: user_id={user.id}")

        user.last_login = datetime.utcnow()
        await session.flush()

        token = await SessionService.open_session(user)
        return SessionResponse(
            token=token,
            identity=Identity(user_id=user.id, email=user.email)
        )

    except JournalError:
        raise
    except Exception as e:
        logger.error(f"签发会话失败: {str(e)}")
        raise JournalError("签发会话失败") from e


@router.post("/logout", response_model=MessageResponse, summary="登出")
async def logout(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_session_token: Optional[str] = Header(None, alias="X-Session-Token")
):
    token = extract_session_token(authorization, x_session_token)
    if not token:
        raise UnauthorizedError()

    await SessionService.close(token)
    return MessageResponse(message="已登出")


@router.get("/me", response_model=IdentityResponse, summary="获取当前用户")
async def get_me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(data=identity)
