"""
请求体编码模块
根据当前激活的 Body 类型，把暂存数据编码写入输出流，并补全默认 Content-Type
"""

import json
import mimetypes
import secrets
import shutil
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from courier.api.body import (
    BinaryFile,
    BodyType,
    FormEntry,
    FormField,
    RawFile,
    RequestBody,
)
from courier.api.errors import ConfigurationError

CRLF = "\r\n"
DEFAULT_BINARY_TYPE = "application/octet-stream"
HEADER_CHARSET = "utf-8"  # multipart 分隔符与分段头

_DEFAULT_CONTENT_TYPES: dict[BodyType, str] = {
    BodyType.FORM_URLENCODED: "application/x-www-form-urlencoded",
    BodyType.RAW: "text/plain",
    BodyType.JSON: "application/json",
    BodyType.BINARY: DEFAULT_BINARY_TYPE,
}


def new_boundary() -> str:
    """multipart 分隔符：纳秒时间戳加随机后缀的十六进制串"""
    return f"{time.time_ns():x}{secrets.token_hex(4)}"


def default_content_type(body_type: BodyType, boundary: str) -> str:
    """Body 类型对应的默认 Content-Type"""
    if body_type == BodyType.FORM_DATA:
        return f"multipart/form-data; boundary={boundary}"
    try:
        return _DEFAULT_CONTENT_TYPES[body_type]
    except KeyError:
        msg = f"不支持的 Body 类型: {body_type}"
        raise ConfigurationError(msg) from None


def has_header(headers: Mapping[str, str], name: str) -> bool:
    """忽略大小写判断请求头是否存在"""
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


def effective_headers(
    headers: Mapping[str, str], body_type: BodyType, boundary: str
) -> dict[str, str]:
    """显式设置的请求头优先，未设置 Content-Type 时补上默认值"""
    merged = dict(headers)
    if not has_header(merged, "Content-Type"):
        merged["Content-Type"] = default_content_type(body_type, boundary)
    return merged


def guess_mime_type(filename: str) -> str:
    """按扩展名推断 MIME 类型，未知时退回 application/octet-stream"""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_BINARY_TYPE


def percent_encode(value: str, charset: str) -> str:
    # 空格编码为 %20 而不是 +
    return quote(value, safe="", encoding=charset)


def encode_pairs(mapping: Mapping[str, Sequence[str]], charset: str) -> str:
    """key/value 分别百分号编码，k=v 之间用 & 连接（按插入顺序，无结尾 &）"""
    return "&".join(
        f"{percent_encode(key, charset)}={percent_encode(value, charset)}"
        for key, values in mapping.items()
        for value in values
    )


def encode_body(
    body: RequestBody, sink: BinaryIO, *, boundary: str, charset: str
) -> None:
    """
    把当前激活类型的数据写入输出流

    Args:
        body: 请求体暂存区
        sink: 二进制输出流
        boundary: multipart 分隔符
        charset: 文本编码使用的字符集

    Raises:
        OSError: 表单文件读取失败或输出流写入失败
        ConfigurationError: 不支持的 Body 类型
    """
    if body.type == BodyType.FORM_DATA:
        _write_form_data(body.form, sink, boundary=boundary, charset=charset)
    elif body.type == BodyType.FORM_URLENCODED:
        sink.write(encode_pairs(body.encoded, charset).encode("ascii"))
    elif body.type == BodyType.RAW:
        sink.write(body.raw.encode(charset))
    elif body.type == BodyType.JSON:
        sink.write(_serialize_json(body).encode(charset))
    elif body.type == BodyType.BINARY:
        sink.write(body.binary)
    else:
        msg = f"不支持的 Body 类型: {body.type}"
        raise ConfigurationError(msg)
    sink.flush()


def _serialize_json(body: RequestBody) -> str:
    if body.json_value is None:
        return ""
    return json.dumps(body.json_value, ensure_ascii=False, separators=(",", ":"))


def _write_form_data(
    form: Mapping[str, Sequence[FormEntry]],
    sink: BinaryIO,
    *,
    boundary: str,
    charset: str,
) -> None:
    written = False
    for key, entries in form.items():
        for entry in entries:
            _write_part(key, entry, sink, boundary=boundary, charset=charset)
            written = True
    # 空表单不输出任何分隔符
    if written:
        sink.write(f"--{boundary}--{CRLF}".encode(HEADER_CHARSET))


def _write_part(
    key: str, entry: FormEntry, sink: BinaryIO, *, boundary: str, charset: str
) -> None:
    """
    写出一个 multipart 分段

    分隔符与分段头始终按 UTF-8 编码，字符集只作用于字段值。
    """
    lines = [f"--{boundary}"]
    source: Path | None = None
    payload = b""
    match entry:
        case FormField():
            entry_charset = entry.charset or charset
            lines.append(f'Content-Disposition: form-data; name="{key}"')
            lines.append(f"Content-Type: text/plain; charset={entry_charset}")
            payload = entry.value.encode(entry_charset)
        case RawFile():
            lines.append(_file_disposition(key, entry.path))
            lines.append(
                f"Content-Type: text/plain; charset={entry.charset or charset}"
            )
            source = entry.path
        case BinaryFile():
            lines.append(_file_disposition(key, entry.path))
            lines.append(f"Content-Type: {guess_mime_type(entry.path.name)}")
            lines.append("Content-Transfer-Encoding: binary")
            source = entry.path
        case _:
            msg = f"不支持的表单项类型: {type(entry).__name__}"
            raise ConfigurationError(msg)

    head = (CRLF.join(lines) + CRLF + CRLF).encode(HEADER_CHARSET)
    if source is not None:
        # 先打开文件，读取失败时不写出半个分段
        with source.open("rb") as f:
            sink.write(head)
            shutil.copyfileobj(f, sink)
    else:
        sink.write(head)
        sink.write(payload)
    sink.write(CRLF.encode(HEADER_CHARSET))


def _file_disposition(key: str, path: Path) -> str:
    return f'Content-Disposition: form-data; name="{key}"; filename="{path.name}"'
