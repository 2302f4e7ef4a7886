"""
评分失效判断
"""
# 标准库导包
from typing import Optional


def should_invalidate(old_text: str, new_text: Optional[str]) -> bool:
    """
    判断条目已有评分是否因文本变化而失效

    比较的是html_to_text之后的纯文本，按字面完全相等判断，空白和大小写的差异都算变化。

    Args:
        old_text: 当前保存的纯文本
        new_text: 本次更新提取出的纯文本，本次更新未修改内容时为None

    Returns:
        是否需要删除旧评分并重新分析
    """
    if new_text is None:
        return False
    return new_text != old_text
