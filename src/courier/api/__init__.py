"""HTTP 请求/响应封装模块"""

from courier.api.body import (
    BinaryFile,
    BodyType,
    FormEntry,
    FormEntryKind,
    FormField,
    RawFile,
    RequestBody,
)
from courier.api.config import ConfigManager, RequestConfig
from courier.api.errors import (
    ConfigurationError,
    CourierError,
    JsonDataError,
    TransportError,
)
from courier.api.request import Method, Request, get
from courier.api.response import Response
from courier.api.transport import Connection, HttpxConnection, HttpxTransport, Transport

__all__ = [
    # body
    "BodyType",
    "FormEntryKind",
    "FormEntry",
    "FormField",
    "RawFile",
    "BinaryFile",
    "RequestBody",
    # config
    "RequestConfig",
    "ConfigManager",
    # errors
    "CourierError",
    "ConfigurationError",
    "TransportError",
    "JsonDataError",
    # transport
    "Connection",
    "Transport",
    "HttpxConnection",
    "HttpxTransport",
    # response
    "Response",
    # request
    "Method",
    "Request",
    "get",
]
