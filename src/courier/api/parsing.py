"""
响应内容解析模块

对同一段文本分别尝试 JSON 对象、JSON 数组、HTML 三种解析，互不依赖，失败时返回 None 而不是抛异常。
"""

import json
import warnings
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, XMLParsedAsHTMLWarning

HTML_PARSER = "html.parser"


def decode_text(content: bytes, charset: str) -> str:
    """按字符集解码，无法解码的字节替换为 U+FFFD"""
    return content.decode(charset, errors="replace")


def parse_json_object(text: str) -> dict[str, Any] | None:
    """严格解析为 JSON 对象"""
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def parse_json_array(text: str) -> list[Any] | None:
    """严格解析为 JSON 数组"""
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, list) else None


def parse_html(text: str) -> BeautifulSoup | None:
    """
    宽松地解析 HTML

    html.parser 会把任意文本当作 body 内容接受，所以纯文本、JSON 也会被视为 HTML；
    只有解析结果既没有标签也没有非空白文本时才返回 None。
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(text, HTML_PARSER)
    if soup.find(True) is None and not soup.get_text(strip=True):
        return None
    return soup
