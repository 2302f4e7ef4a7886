"""
HTML转纯文本工具
"""
# 标准库导包
import re

# 先整体移除script/style元素（含内容），再移除其余标签
_SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"</?[^>]+(>|$)")


def html_to_text(html: str) -> str:
    """
    从富文本内容中提取纯文本

    标签之间的文本和空白原样保留，不解码HTML实体；
    不闭合的标签按尽量移除处理，任何输入都不会报错。
    对结果再次调用返回相同结果。

    Args:
        html: 富文本（HTML）字符串

    Returns:
        纯文本字符串
    """
    text = _SCRIPT_STYLE_PATTERN.sub("", html)
    return _TAG_PATTERN.sub("", text)
