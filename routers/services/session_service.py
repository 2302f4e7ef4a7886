"""
登录会话服务类
处理会话令牌的签发、解析和注销
"""
# 标准库导包
import logging
import secrets
from typing import Optional

# 第三方库导包
from pydantic import ValidationError

# 项目内部导包
from models import Identity
from redis_client import get_auth_session, set_auth_session, delete_auth_session
from storage.models.user import User

# 配置日志
logger = logging.getLogger(__name__)


class SessionService:
    """登录会话服务类"""

    @staticmethod
    async def open_session(user: User) -> str:
        """
        为用户签发新的会话令牌

        Args:
            user: 已持久化的用户

        Returns:
            会话令牌
        """
        token = secrets.token_urlsafe(32)
        identity = Identity(user_id=user.id, email=user.email)
        await set_auth_session(token, identity.model_dump())
        logger.info(f"签发会话成功: user_id={user.id}")
        return token

    @staticmethod
    async def resolve(token: str) -> Optional[Identity]:
        """
        根据令牌解析用户身份

        Args:
            token: 会话令牌

        Returns:
            Identity，会话不存在、已过期或数据损坏时返回None
        """
        session_data = await get_auth_session(token)
        if not session_data:
            return None

        try:
            return Identity.model_validate(session_data)
        except ValidationError:
            logger.warning("会话数据格式错误，按未登录处理")
            return None

    @staticmethod
    async def close(token: str) -> bool:
        """
        注销会话

        Args:
            token: 会话令牌

        Returns:
            会话此前是否存在
        """
        existed = await delete_auth_session(token)
        logger.info(f"注销会话: existed={existed}")
        return existed
