"""
请求体模块
表单（multipart/form-data）、URL 编码表单、原始文本、JSON、二进制五种 Body 类型，
同一时刻只有一种类型处于激活状态（最后一次写入的类型生效）
"""

import copy
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from courier.api.config import DEFAULT_CHARSET
from courier.api.errors import JsonDataError
from courier.api.parsing import parse_json_array, parse_json_object


class BodyType(str, Enum):
    """Body 类型枚举"""

    FORM_DATA = "form-data"  # multipart/form-data
    FORM_URLENCODED = "x-www-form-urlencoded"  # URL 编码表单
    RAW = "raw"  # 纯文本
    JSON = "json"  # JSON 格式
    BINARY = "binary"  # 二进制数据


class FormEntryKind(str, Enum):
    """表单项类型枚举"""

    FIELD = "field"  # 普通字段
    RAW_FILE = "raw-file"  # 文本文件
    BINARY_FILE = "binary-file"  # 二进制文件


class FormField(BaseModel):
    """普通字段"""

    kind: Literal[FormEntryKind.FIELD] = FormEntryKind.FIELD
    value: str
    charset: str | None = None  # None 表示使用请求配置的字符集

    model_config = {"frozen": True}


class RawFile(BaseModel):
    """文本文件，按原样拷贝，声明为 text/plain"""

    kind: Literal[FormEntryKind.RAW_FILE] = FormEntryKind.RAW_FILE
    path: Path
    charset: str | None = None

    model_config = {"frozen": True}


class BinaryFile(BaseModel):
    """二进制文件，Content-Type 按扩展名推断"""

    kind: Literal[FormEntryKind.BINARY_FILE] = FormEntryKind.BINARY_FILE
    path: Path

    model_config = {"frozen": True}


# 表单项（按 kind 区分的不可变联合类型）
FormEntry = Annotated[FormField | RawFile | BinaryFile, Field(discriminator="kind")]

JsonValue = dict[str, Any] | list[Any]


class RequestBody(BaseModel):
    """请求体暂存区

    各类型的数据互不影响、各自保留；发送时只编码当前激活类型（type）的数据。
    """

    type: BodyType = BodyType.RAW
    form: dict[str, list[FormEntry]] = Field(default_factory=dict)
    encoded: dict[str, list[str]] = Field(default_factory=dict)
    raw: str = ""
    json_value: JsonValue | None = None
    binary: bytes = b""

    # ---- multipart/form-data ----

    def _add_form_entry(self, key: str, entry: FormEntry) -> list[FormEntry]:
        self.type = BodyType.FORM_DATA
        self.form.setdefault(key, []).append(entry)
        return list(self.form[key])

    def add_form_field(
        self, key: str, value: str, charset: str | None = None
    ) -> list[FormEntry]:
        """添加表单字段，返回该 key 下的全部表单项"""
        return self._add_form_entry(key, FormField(value=value, charset=charset))

    def add_form_raw_file(
        self, key: str, path: str | Path, charset: str | None = None
    ) -> list[FormEntry]:
        """添加文本文件（发送时读取）"""
        return self._add_form_entry(key, RawFile(path=Path(path), charset=charset))

    def add_form_binary_file(self, key: str, path: str | Path) -> list[FormEntry]:
        """添加二进制文件（发送时读取）"""
        return self._add_form_entry(key, BinaryFile(path=Path(path)))

    def remove_form_field(self, key: str) -> list[FormEntry] | None:
        return self.form.pop(key, None)

    def clear_form(self) -> dict[str, list[FormEntry]]:
        """清空表单，返回清空前的内容"""
        data = {key: list(entries) for key, entries in self.form.items()}
        self.form.clear()
        return data

    # ---- application/x-www-form-urlencoded ----

    def add_encoded_field(self, key: str, value: str) -> list[str]:
        """添加 URL 编码表单字段，返回该 key 下的全部值"""
        self.type = BodyType.FORM_URLENCODED
        self.encoded.setdefault(key, []).append(value)
        return list(self.encoded[key])

    def remove_encoded_field(self, key: str) -> list[str] | None:
        return self.encoded.pop(key, None)

    def clear_encoded_fields(self) -> dict[str, list[str]]:
        data = {key: list(values) for key, values in self.encoded.items()}
        self.encoded.clear()
        return data

    # ---- text/plain ----

    def add_raw_data(self, text: str) -> str:
        """追加原始文本，返回追加后的完整文本"""
        self.type = BodyType.RAW
        self.raw += text
        return self.raw

    def add_raw_file(self, path: str | Path, charset: str | None = None) -> str:
        """追加文件内容到原始文本；读取失败时不修改任何状态"""
        text = Path(path).read_text(encoding=charset or DEFAULT_CHARSET)
        return self.add_raw_data(text)

    def clear_raw_data(self) -> str:
        data, self.raw = self.raw, ""
        return data

    # ---- application/json ----

    def add_json_data(self, value: JsonValue | str) -> JsonValue | None:
        """
        设置 JSON 数据（对象与数组互斥，设置一个即清除另一个）

        Args:
            value: dict、list，或可解析为 JSON 对象/数组的字符串

        Returns:
            之前的 JSON 数据副本，没有则为 None

        Raises:
            JsonDataError: 字符串既不是 JSON 对象也不是 JSON 数组（状态保持不变）
        """
        if isinstance(value, str):
            value = _parse_json_root(value)
        elif not isinstance(value, (dict, list)):
            msg = f"JSON 数据必须是 dict、list 或 str，实际为 {type(value).__name__}"
            raise JsonDataError(msg)

        previous = copy.deepcopy(self.json_value)
        self.json_value = value
        self.type = BodyType.JSON
        return previous

    def clear_json_data(self) -> JsonValue | None:
        data, self.json_value = self.json_value, None
        return data

    # ---- application/octet-stream ----

    def add_binary_data(self, data: bytes) -> bytes:
        """追加二进制数据，返回追加后的完整数据"""
        self.type = BodyType.BINARY
        self.binary += bytes(data)
        return self.binary

    def add_binary_file(self, path: str | Path) -> bytes:
        return self.add_binary_data(Path(path).read_bytes())

    def clear_binary_data(self) -> bytes:
        data, self.binary = self.binary, b""
        return data

    # ---- 切换类型（不修改已暂存数据） ----

    def use_form(self) -> None:
        self.type = BodyType.FORM_DATA

    def use_encoded_form(self) -> None:
        self.type = BodyType.FORM_URLENCODED

    def use_raw(self) -> None:
        self.type = BodyType.RAW

    def use_json(self) -> None:
        self.type = BodyType.JSON

    def use_binary(self) -> None:
        self.type = BodyType.BINARY


def _parse_json_root(text: str) -> JsonValue:
    """先尝试解析为 JSON 对象，再尝试 JSON 数组"""
    value = parse_json_object(text)
    if value is None:
        value = parse_json_array(text)
    if value is None:
        msg = "无法解析为 JSON 对象或 JSON 数组"
        raise JsonDataError(msg)
    return value
