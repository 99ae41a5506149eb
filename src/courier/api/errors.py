"""
异常定义模块
配置错误、传输错误、JSON 数据错误
"""


class CourierError(Exception):
    """courier 异常基类"""


class ConfigurationError(CourierError, ValueError):
    """配置错误：在任何网络 I/O 之前抛出（未设置 URL、协议不支持、方法未知等）"""


class TransportError(CourierError, OSError):
    """传输层 I/O 错误（连接、写入、读取失败）"""


class JsonDataError(CourierError, ValueError):
    """字符串既不能解析为 JSON 对象也不能解析为 JSON 数组"""
