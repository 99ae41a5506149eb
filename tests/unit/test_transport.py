"""
HttpxTransport 单元测试（httpx.MockTransport，不访问网络）
"""

import httpx
import pytest

from courier.api.errors import ConfigurationError, TransportError
from courier.api.request import Request
from courier.api.transport import HttpxTransport, parse_http_date

DATE = "Wed, 21 Oct 2015 07:28:00 GMT"


def make_transport(handler) -> HttpxTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client, timeout=5.0)


class TestParseHttpDate:
    def test_valid(self):
        assert parse_http_date(DATE) == 1445412480000

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_missing_or_invalid(self, value):
        assert parse_http_date(value) == 0


class TestHttpxConnection:
    def test_exchange(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers.get("content-type")
            seen["body"] = request.content
            return httpx.Response(
                201,
                headers=[("Date", DATE), ("X-Multi", "a"), ("X-Multi", "b")],
                content=b'{"id": 7}',
            )

        transport = make_transport(handler)
        connection = transport.open("http://api.test/items?x=1")
        connection.set_method("post")
        connection.set_header("Content-Type", "application/json")
        connection.set_output_enabled(True)
        connection.output_stream().write(b'{"a":1}')
        connection.send()

        assert seen == {
            "method": "POST",
            "url": "http://api.test/items?x=1",
            "content_type": "application/json",
            "body": b'{"a":1}',
        }
        assert connection.status_code == 201
        assert connection.date == 1445412480000
        fields = connection.header_fields()
        assert fields[None] == ["HTTP/1.1 201 Created"]
        assert fields["X-Multi"] == ["a", "b"]
        assert connection.input_stream().read() == b'{"id": 7}'

        connection.close()
        connection.close()
        transport.close()

    def test_output_requires_enabling(self):
        transport = make_transport(lambda request: httpx.Response(200))
        connection = transport.open("http://api.test/")
        with pytest.raises(ConfigurationError):
            connection.output_stream()

    def test_no_output_after_send(self):
        transport = make_transport(lambda request: httpx.Response(200))
        connection = transport.open("http://api.test/")
        connection.set_output_enabled(True)
        connection.send()
        with pytest.raises(ConfigurationError):
            connection.output_stream()

    def test_request_error_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        connection = make_transport(handler).open("http://api.test/")
        with pytest.raises(TransportError) as exc_info:
            connection.send()
        assert isinstance(exc_info.value, OSError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_rejects_unsupported_scheme(self):
        transport = make_transport(lambda request: httpx.Response(200))
        with pytest.raises(ConfigurationError):
            transport.open("ftp://api.test/file")

    def test_caller_client_not_closed(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with HttpxTransport(client=client):
            pass
        assert not client.is_closed


class TestRequestOverHttpx:
    """Request + HttpxTransport 端到端"""

    def test_multipart_upload(self, tmp_path):
        path = tmp_path / "avatar.png"
        path.write_bytes(b"\x89PNG")
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["content_type"] = request.headers["content-type"]
            captured["body"] = request.content
            return httpx.Response(
                200,
                headers={"Content-Type": "text/html"},
                content=b"<html><body><a href='/next'>next</a></body></html>",
            )

        request = Request("http://api.test/upload?v=2")
        request.body.add_form_field("name", "test")
        request.body.add_form_binary_file("avatar", path)
        response = request.post(make_transport(handler))

        assert captured["content_type"] == (
            f"multipart/form-data; boundary={request.boundary}"
        )
        assert b'name="avatar"; filename="avatar.png"' in captured["body"]
        assert b"\x89PNG\r\n" in captured["body"]
        assert captured["body"].endswith(f"--{request.boundary}--\r\n".encode())

        assert response.status_line() == "HTTP/1.1 200 OK"
        assert response.is_html()
        assert not response.is_json_object()
        assert response.links() == ["http://api.test/next"]
        assert response.url == "http://api.test/upload?v=2"

    def test_urlencoded_post(self):
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = request.content
            captured["content_type"] = request.headers["content-type"]
            return httpx.Response(200, json=[1, 2, 3])

        request = Request("http://api.test/form")
        request.body.add_encoded_field("a", "1")
        request.body.add_encoded_field("b", "2 2")
        response = request.post(make_transport(handler))

        assert captured == {
            "body": b"a=1&b=2%202",
            "content_type": "application/x-www-form-urlencoded",
        }
        assert response.is_json_array()
        assert response.json_array() == [1, 2, 3]
