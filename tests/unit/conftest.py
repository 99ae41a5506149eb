"""
单元测试公共夹具：内存中的假传输层，不访问网络
"""

import io

import pytest

from courier.api.config import ConfigManager
from courier.api.errors import TransportError


class FailingSink(io.RawIOBase):
    """写入即失败的输出流"""

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        raise OSError("connection reset while writing body")


class FakeConnection:
    def __init__(
        self,
        url: str,
        *,
        status_code: int = 200,
        body: bytes = b"",
        headers: dict[str, list[str]] | None = None,
        date: int = 0,
        fail_on_write: bool = False,
        fail_on_send: bool = False,
    ):
        self.url = url
        self.method: str | None = None
        self.headers: dict[str, str] = {}
        self.output_enabled = False
        self.written = io.BytesIO()
        self.sent = False
        self.close_calls = 0
        self._status_code = status_code
        self._body = body
        self._headers = headers or {}
        self._date = date
        self._fail_on_write = fail_on_write
        self._fail_on_send = fail_on_send

    def set_method(self, method: str) -> None:
        self.method = method

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def set_output_enabled(self, enabled: bool) -> None:
        self.output_enabled = enabled

    def output_stream(self):
        assert self.output_enabled, "output requested before being enabled"
        if self._fail_on_write:
            return FailingSink()
        return self.written

    def send(self) -> None:
        if self._fail_on_send:
            raise TransportError("connection refused")
        self.sent = True

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def date(self) -> int:
        return self._date

    def header_fields(self) -> dict[str | None, list[str]]:
        return {None: [f"HTTP/1.1 {self._status_code} OK"], **self._headers}

    def input_stream(self):
        return io.BytesIO(self._body)

    def close(self) -> None:
        self.close_calls += 1


class FakeTransport:
    def __init__(self, **connection_options):
        self.connection_options = connection_options
        self.connections: list[FakeConnection] = []
        self.closed = False

    def open(self, url: str) -> FakeConnection:
        connection = FakeConnection(url, **self.connection_options)
        self.connections.append(connection)
        return connection

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]


@pytest.fixture(autouse=True)
def reset_config():
    """每个测试前后重置全局配置"""
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(
        body=b'{"ok": true}',
        headers={"Content-Type": ["application/json"]},
        date=1445412480000,
    )


@pytest.fixture
def make_transport():
    """按需构造假传输层：make_transport(fail_on_write=True, ...)"""
    return FakeTransport
