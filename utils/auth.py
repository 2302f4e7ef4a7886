"""
认证工具
从请求中解析会话令牌并得到当前用户身份
"""
# 标准库导包
from typing import Optional

# 第三方库导包
from fastapi import Header

# 项目内部导包
from exceptions import UnauthorizedError
from models import Identity
from routers.services.session_service import SessionService


def extract_session_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_session_token: Optional[str] = Header(None, alias="X-Session-Token")
) -> Optional[str]:
    """
    从Header中提取会话令牌

    优先使用 Authorization: Bearer <token>，其次使用 X-Session-Token

    Returns:
        令牌字符串或None
    """
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

    if x_session_token and x_session_token.strip():
        return x_session_token.strip()

    return None


async def get_current_identity(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_session_token: Optional[str] = Header(None, alias="X-Session-Token")
) -> Identity:
    """
    获取当前登录用户身份，作为FastAPI依赖使用

    Returns:
        Identity对象

    Raises:
        UnauthorizedError: 缺少令牌或会话不存在/已过期
    """
    token = extract_session_token(authorization, x_session_token)
    if not token:
        raise UnauthorizedError()

    identity = await SessionService.resolve(token)
    if identity is None:
        raise UnauthorizedError()

    return identity
