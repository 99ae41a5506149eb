"""
配置管理模块
字符集、超时、默认协议等请求级配置，支持全局默认值覆盖
"""

from typing import Any, ClassVar

from pydantic import BaseModel

DEFAULT_CHARSET = "utf-8"
USER_AGENT = "courier/0.1.0"


class RequestConfig(BaseModel):
    """请求配置"""

    charset: str = DEFAULT_CHARSET  # 编码/解码使用的字符集
    timeout: float = 30.0  # 超时时间（秒）
    default_scheme: str = "http"  # URL 未指定协议时使用
    user_agent: str = USER_AGENT  # 调用方未设置 User-Agent 时发送

    model_config = {"extra": "forbid"}


class ConfigManager:
    """全局默认配置管理器（单例模式）"""

    _current: ClassVar[RequestConfig] = RequestConfig()

    @classmethod
    def configure(cls, **overrides: Any) -> RequestConfig:
        """覆盖全局默认配置，返回新的配置"""
        cls._current = RequestConfig.model_validate(
            {**cls._current.model_dump(), **overrides}
        )
        return cls.get()

    @classmethod
    def get(cls) -> RequestConfig:
        """获取当前默认配置（副本）"""
        return cls._current.model_copy()

    @classmethod
    def reset(cls) -> None:
        """重置为内置默认值（用于测试）"""
        cls._current = RequestConfig()
