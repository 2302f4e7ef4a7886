"""
Utils layer
工具函数层
"""

from .html_text import html_to_text
from .auth import get_current_identity, extract_session_token

__all__ = ["html_to_text", "get_current_identity", "extract_session_token"]
