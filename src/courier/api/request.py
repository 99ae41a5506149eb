"""
请求模块
可复用的请求配置（URL、方法、请求头、Query 参数、请求体）与 GET/POST/PUT/DELETE 发送
"""

import json
import re
from contextlib import closing
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from courier.api.body import BodyType, RequestBody
from courier.api.config import ConfigManager, RequestConfig
from courier.api.encoder import (
    effective_headers,
    encode_body,
    has_header,
    new_boundary,
)
from courier.api.errors import ConfigurationError
from courier.api.query import build_url, merge_pairs, split_query
from courier.api.response import Response
from courier.api.transport import SUPPORTED_SCHEMES, HttpxTransport, Transport
from courier.util.log import get_logger, redact_headers, truncate

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")


class Method(str, Enum):
    """HTTP 方法枚举"""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def has_body(self) -> bool:
        """是否发送请求体（仅 POST/PUT）"""
        return self in (Method.POST, Method.PUT)


class Request(BaseModel):
    """
    可变、可重复发送的请求

    Example:
        request = Request(url="https://httpbin.org/post?page=1")
        request.body.add_json_data({"name": "test"})
        response = request.post()
    """

    url: str | None = None  # 不含 Query 的 URL
    method: Method = Method.GET  # send() 使用的方法
    headers: dict[str, str] = Field(default_factory=dict)  # 请求头
    params: dict[str, list[str]] = Field(default_factory=dict)  # Query 参数
    body: RequestBody = Field(default_factory=RequestBody)  # 请求体
    config: RequestConfig = Field(default_factory=ConfigManager.get)  # 请求配置

    _boundary: str = PrivateAttr(default_factory=new_boundary)

    def __init__(self, url: str | None = None, **data: Any) -> None:
        super().__init__(**data)
        if url is not None:
            self.set_url(url)

    @property
    def boundary(self) -> str:
        """multipart 分隔符（每个实例生成一次，所有发送共用）"""
        return self._boundary

    @property
    def body_type(self) -> BodyType:
        return self.body.type

    # ---- URL ----

    def set_url(self, url: str) -> None:
        """
        设置 URL

        未指定协议时使用 config.default_scheme；仅支持 http/https。
        URL 中 ? 之后的内容被拆出并按顺序追加到 Query 参数。
        """
        base, pairs = split_query(url)
        # 只看 ? 之前的部分，Query 中的 URL 不影响协议判断
        found = _SCHEME_RE.match(base)
        if found is None:
            base = f"{self.config.default_scheme}://{base}"
            scheme = self.config.default_scheme.lower()
        else:
            scheme = found.group(1).lower()
        if scheme not in SUPPORTED_SCHEMES:
            msg = f"不支持 {scheme} 协议的请求，仅支持 http/https"
            raise ConfigurationError(msg)
        merge_pairs(self.params, pairs)
        self.url = base

    @property
    def protocol(self) -> str:
        return self._require_url().split("://", 1)[0].lower()

    def full_url(self) -> str:
        """拼接编码后的 Query 参数的完整 URL"""
        return build_url(self._require_url(), self.params, self.config.charset)

    def _require_url(self) -> str:
        if self.url is None:
            msg = "未设置 URL，请先调用 set_url()"
            raise ConfigurationError(msg)
        return self.url

    # ---- 方法 ----

    def set_method(self, method: Method | str) -> None:
        """设置 send() 使用的方法（字符串忽略大小写）"""
        if isinstance(method, Method):
            self.method = method
            return
        try:
            self.method = Method(method.upper())
        except ValueError:
            msg = f"不支持的请求方法: {method}"
            raise ConfigurationError(msg) from None

    # ---- 请求头 ----

    def set_header(self, key: str, value: str) -> str | None:
        """设置请求头，返回之前的值"""
        previous = self.headers.get(key)
        self.headers[key] = value
        return previous

    def get_header(self, key: str) -> str | None:
        return self.headers.get(key)

    def get_headers(self) -> dict[str, str]:
        return dict(self.headers)

    def remove_header(self, key: str) -> str | None:
        return self.headers.pop(key, None)

    # ---- Query 参数 ----

    def add_query_param(self, key: str, value: str) -> list[str]:
        """追加 Query 参数，返回该 key 下的全部值"""
        self.params.setdefault(key, []).append(value)
        return list(self.params[key])

    def get_query_param(self, key: str) -> list[str] | None:
        values = self.params.get(key)
        return list(values) if values is not None else None

    def remove_query_param(self, key: str) -> list[str] | None:
        return self.params.pop(key, None)

    def clear_query_params(self) -> dict[str, list[str]]:
        data = {key: list(values) for key, values in self.params.items()}
        self.params.clear()
        return data

    # ---- 发送 ----

    def send(self, transport: Transport | None = None) -> Response:
        """按 method 字段发送请求"""
        return self._exchange(self.method, transport)

    def get(self, transport: Transport | None = None) -> Response:
        return self._exchange(Method.GET, transport)

    def post(self, transport: Transport | None = None) -> Response:
        return self._exchange(Method.POST, transport)

    def put(self, transport: Transport | None = None) -> Response:
        return self._exchange(Method.PUT, transport)

    def delete(self, transport: Transport | None = None) -> Response:
        return self._exchange(Method.DELETE, transport)

    def _request_headers(self, method: Method) -> dict[str, str]:
        """计算最终请求头：显式设置优先，其次是 Body 类型默认值"""
        headers = dict(self.headers)
        if not has_header(headers, "User-Agent"):
            headers["User-Agent"] = self.config.user_agent
        if method.has_body:
            headers = effective_headers(headers, self.body.type, self._boundary)
        return headers

    def _exchange(self, method: Method, transport: Transport | None) -> Response:
        """
        执行一次请求/响应交换

        连接在所有退出路径上都会被关闭；未传入 transport 时临时创建并在结束后关闭。
        """
        log = get_logger("Request")

        # 配置错误在打开连接之前抛出
        url = self.full_url()
        headers = self._request_headers(method)

        owns_transport = transport is None
        active = transport or HttpxTransport(timeout=self.config.timeout)

        log.debug(
            "Sending request: {method} {url} body_type={body_type} headers={headers}",
            method=method.value,
            url=url,
            body_type=self.body.type.value if method.has_body else None,
            headers=redact_headers(headers),
        )
        if method.has_body and self.body.type == BodyType.JSON:
            log.debug(
                "Request body (json): {body}",
                body=truncate(json.dumps(self.body.json_value, ensure_ascii=False)),
            )

        try:
            with closing(active.open(url)) as connection:
                connection.set_method(method.value)
                for key, value in headers.items():
                    connection.set_header(key, value)
                if method.has_body:
                    connection.set_output_enabled(True)
                    encode_body(
                        self.body,
                        connection.output_stream(),
                        boundary=self._boundary,
                        charset=self.config.charset,
                    )
                connection.send()
                response = Response.parse(connection, charset=self.config.charset)
        finally:
            if owns_transport:
                active.close()

        log.debug(
            "Received response: {status_line} json={is_json} html={is_html} body={body}",
            status_line=response.status_line() or response.status_code,
            is_json=response.is_json_object() or response.is_json_array(),
            is_html=response.is_html(),
            body=truncate(response.text),
        )
        return response


def get(url: str, transport: Transport | None = None) -> Response:
    """快捷 GET 请求"""
    return Request(url=url).get(transport)
