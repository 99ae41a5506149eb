"""
响应封装模块
一次性读取完整响应体，解码为文本，并尝试解析为 JSON 对象/数组与 HTML
"""

import copy
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from pydantic import BaseModel, PrivateAttr

from courier.api.config import DEFAULT_CHARSET
from courier.api.parsing import (
    decode_text,
    parse_html,
    parse_json_array,
    parse_json_object,
)
from courier.api.transport import Connection

HeaderFields = dict[str | None, list[str]]


class Response(BaseModel):
    """响应（构造后不可变）"""

    content: bytes = b""  # 原始响应体
    text: str = ""  # 解码后的文本
    status_code: int = 0
    date: int = 0  # 响应时间（毫秒时间戳），未知为 0
    url: str = ""  # 发起请求的 URL

    _json_object: dict[str, Any] | None = PrivateAttr(default=None)
    _json_array: list[Any] | None = PrivateAttr(default=None)
    _is_html: bool = PrivateAttr(default=False)
    _headers: HeaderFields = PrivateAttr(default_factory=dict)

    model_config = {"frozen": True}

    @classmethod
    def from_bytes(
        cls,
        content: bytes,
        *,
        headers: HeaderFields | None = None,
        status_code: int = 0,
        date: int = 0,
        url: str = "",
        charset: str = DEFAULT_CHARSET,
    ) -> "Response":
        """
        由完整响应体构造响应

        JSON 对象优先于 JSON 数组（二者至多一个存在）；HTML 解析独立进行，不受 JSON 结果影响。
        """
        text = decode_text(content, charset)
        response = cls(
            content=content, text=text, status_code=status_code, date=date, url=url
        )
        response._json_object = parse_json_object(text)
        if response._json_object is None:
            response._json_array = parse_json_array(text)
        response._is_html = parse_html(text) is not None
        response._headers = _copy_headers(headers or {})
        return response

    @classmethod
    def parse(
        cls, connection: Connection, *, charset: str = DEFAULT_CHARSET
    ) -> "Response":
        """从已完成交换的连接读取响应（输入流只读取一次）"""
        with connection.input_stream() as stream:
            content = stream.read()
        return cls.from_bytes(
            content,
            headers=connection.header_fields(),
            status_code=connection.status_code,
            date=connection.date,
            url=connection.url,
            charset=charset,
        )

    def is_json_object(self) -> bool:
        """响应体能否解析为 JSON 对象"""
        return self._json_object is not None

    def is_json_array(self) -> bool:
        """响应体能否解析为 JSON 数组"""
        return self._json_array is not None

    def is_html(self) -> bool:
        """响应体能否解析为 HTML（宽松判断，纯文本也会命中）"""
        return self._is_html

    def json_object(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._json_object)

    def json_array(self) -> list[Any] | None:
        return copy.deepcopy(self._json_array)

    def json(self) -> dict[str, Any]:
        """获取 JSON 对象响应，不是对象时返回空字典"""
        return self.json_object() or {}

    def html(self) -> BeautifulSoup | None:
        """获取 HTML 文档；文档可变，每次调用都重新解析"""
        if not self._is_html:
            return None
        return parse_html(self.text)

    def links(self) -> list[str]:
        """页面中所有 <a href> 链接，按请求 URL 解析为绝对地址"""
        soup = self.html()
        if soup is None:
            return []
        return [urljoin(self.url, a["href"]) for a in soup.find_all("a", href=True)]

    def header_fields(self) -> HeaderFields:
        """响应头副本（每次调用返回独立副本）"""
        return _copy_headers(self._headers)

    def header_field(self, name: str) -> list[str] | None:
        """按名称获取响应头的值（忽略大小写）"""
        lowered = name.lower()
        for key, values in self._headers.items():
            if key is not None and key.lower() == lowered:
                return list(values)
        return None

    def status_line(self) -> str:
        """状态行，如 HTTP/1.1 200 OK"""
        values = self._headers.get(None)
        return values[0] if values else ""

    def is_success(self) -> bool:
        """是否成功响应 (2xx)"""
        return 200 <= self.status_code < 300

    def is_client_error(self) -> bool:
        """是否客户端错误 (4xx)"""
        return 400 <= self.status_code < 500

    def is_server_error(self) -> bool:
        """是否服务端错误 (5xx)"""
        return 500 <= self.status_code < 600

    def __str__(self) -> str:
        lines = []
        for key, values in self._headers.items():
            value = values[0] if len(values) == 1 else ", ".join(values)
            lines.append(value if key is None else f"{key}: {value}")
        lines.append(self.text)
        return "\n".join(lines)


def _copy_headers(headers: HeaderFields) -> HeaderFields:
    return {key: list(values) for key, values in headers.items()}
