"""
传输层模块
定义连接/传输协议，并提供基于 httpx 的默认实现
"""

import io
from email.utils import parsedate_to_datetime
from typing import BinaryIO, Protocol
from urllib.parse import urlsplit

import httpx

from courier.api.errors import ConfigurationError, TransportError
from courier.util.log import get_logger

SUPPORTED_SCHEMES = ("http", "https")


class Connection(Protocol):
    """单次请求/响应交换所用的连接"""

    url: str

    def set_method(self, method: str) -> None: ...

    def set_header(self, key: str, value: str) -> None: ...

    def set_output_enabled(self, enabled: bool) -> None: ...

    def output_stream(self) -> BinaryIO: ...

    def send(self) -> None: ...

    @property
    def status_code(self) -> int: ...

    @property
    def date(self) -> int: ...

    def header_fields(self) -> dict[str | None, list[str]]: ...

    def input_stream(self) -> BinaryIO: ...

    def close(self) -> None: ...


class Transport(Protocol):
    """连接工厂"""

    def open(self, url: str) -> Connection: ...

    def close(self) -> None: ...


def parse_http_date(value: str | None) -> int:
    """解析 HTTP Date 头为毫秒时间戳，缺失或格式错误时返回 0"""
    if not value:
        return 0
    try:
        return int(parsedate_to_datetime(value).timestamp() * 1000)
    except (TypeError, ValueError):
        return 0


class HttpxConnection:
    """基于 httpx.Client 的连接：请求体先写入内存缓冲，send() 时一次性发出"""

    def __init__(self, client: httpx.Client, url: str, *, timeout: float = 30.0):
        self.url = url
        self._client = client
        self._timeout = timeout
        self._method = "GET"
        self._headers: dict[str, str] = {}
        self._output_enabled = False
        self._output: io.BytesIO | None = None
        self._response: httpx.Response | None = None
        self._closed = False
        self._log = get_logger("HttpxConnection")

    def set_method(self, method: str) -> None:
        self._method = method.upper()

    def set_header(self, key: str, value: str) -> None:
        self._headers[key] = value

    def set_output_enabled(self, enabled: bool) -> None:
        self._output_enabled = enabled

    def output_stream(self) -> BinaryIO:
        """获取请求体输出流（仅在开启输出且尚未发送时可用）"""
        if not self._output_enabled:
            msg = "输出未开启，请先调用 set_output_enabled(True)"
            raise ConfigurationError(msg)
        if self._response is not None:
            msg = "请求已发送，无法再写入请求体"
            raise ConfigurationError(msg)
        if self._output is None:
            self._output = io.BytesIO()
        return self._output

    def send(self) -> None:
        """执行请求，读取完整响应体"""
        content = self._output.getvalue() if self._output is not None else None
        try:
            self._response = self._client.request(
                method=self._method,
                url=self.url,
                headers=self._headers,
                content=content,
                timeout=self._timeout,
            )
        except httpx.RequestError as e:
            self._log.warning(
                "Request failed: {method} {url} error={error}",
                method=self._method,
                url=self.url,
                error=str(e),
            )
            raise TransportError(str(e)) from e

    @property
    def response(self) -> httpx.Response:
        if self._response is None:
            msg = "请求尚未发送"
            raise ConfigurationError(msg)
        return self._response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def date(self) -> int:
        return parse_http_date(self.response.headers.get("date"))

    def header_fields(self) -> dict[str | None, list[str]]:
        """响应头（保留原始大小写），None 键对应状态行"""
        response = self.response
        fields: dict[str | None, list[str]] = {
            None: [
                f"{response.http_version} {response.status_code} "
                f"{response.reason_phrase}".rstrip()
            ]
        }
        for raw_key, raw_value in response.headers.raw:
            key = raw_key.decode("latin-1")
            fields.setdefault(key, []).append(raw_value.decode("latin-1"))
        return fields

    def input_stream(self) -> BinaryIO:
        return io.BytesIO(self.response.content)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            self._response.close()
        if self._output is not None:
            self._output.close()


class HttpxTransport:
    """基于 httpx 的传输实现"""

    def __init__(self, client: httpx.Client | None = None, *, timeout: float = 30.0):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    @property
    def client(self) -> httpx.Client:
        """懒加载 HTTP 客户端"""
        if self._client is None:
            self._client = httpx.Client()
        return self._client

    def open(self, url: str) -> HttpxConnection:
        scheme = urlsplit(url).scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            msg = f"不支持 {scheme or '(空)'} 协议的请求"
            raise ConfigurationError(msg)
        return HttpxConnection(self.client, url, timeout=self.timeout)

    def close(self) -> None:
        """关闭 HTTP 客户端"""
        if self._client and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
