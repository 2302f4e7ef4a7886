"""
业务异常定义

每个异常携带稳定的错误类型(kind)和HTTP状态码，由main.py中注册的异常处理器统一转换为响应
"""
# 标准库导包
from typing import Any, Dict, List, Optional


class JournalError(Exception):
    """业务异常基类"""

    kind: str = "InternalError"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.details = details or []
        super().__init__(self.message)


class UnauthorizedError(JournalError):
    """未登录或会话已失效"""

    kind = "Unauthorized"
    status_code = 401

    def __init__(self, message: str = "未登录或会话已过期"):
        super().__init__(message)


class ForbiddenError(JournalError):
    """已登录但无权操作目标资源"""

    kind = "Forbidden"
    status_code = 403


class NotFoundError(JournalError):
    """目标资源不存在"""

    kind = "NotFound"
    status_code = 404


class RequestValidationFailed(JournalError):
    """请求参数不合法，details中包含字段级信息"""

    kind = "ValidationError"
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        if details is None and field is not None:
            details = [{"field": field, "message": message}]
        super().__init__(message, details)


class ConflictError(JournalError):
    """与已有数据冲突（同一天重复记录、条目正在被修改）"""

    kind = "Conflict"
    status_code = 409


class AnalysisError(JournalError):
    """情绪分析失败基类，只在服务内部流转，不会作为请求失败返回"""

    status_code = 502

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message)


class ProviderUnavailableError(AnalysisError):
    """分析服务网络错误、超时或服务端错误，可由调用方择机重试"""

    kind = "ProviderUnavailable"


class InvalidAnalysisError(AnalysisError):
    """分析服务返回内容未通过校验，相同输入不应重试"""

    kind = "InvalidAnalysis"
