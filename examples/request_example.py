"""
Request 使用示例
展示如何配置请求头、Query 参数与各类请求体，并读取解析后的响应。
"""

from pathlib import Path

from courier.api import ConfigManager, HttpxTransport, Request
from courier.util.log import configure_logging, shutdown_logging

configure_logging(
    log_dir=Path(__file__).resolve().parent / "_logs",
    level="DEBUG",
    to_console=True,
    to_file=True,
)

# 1. 全局配置：新建的 Request 都会拿到这份配置的副本
ConfigManager.configure(timeout=10, default_scheme="https")

with HttpxTransport(timeout=10) as transport:
    # 2. GET：URL 中的 Query 会被拆出，可继续追加
    request = Request("httpbin.org/get?page=1")
    request.add_query_param("tag", "a b")
    request.set_header("Accept", "application/json")
    response = request.get(transport)
    print(response.status_line(), response.json().get("args"))

    # 3. POST JSON：字符串形式会先校验再保存
    request = Request("https://httpbin.org/post")
    request.body.add_json_data('{"name": "test", "tags": [1, 2]}')
    response = request.post(transport)
    print(response.is_json_object(), response.json().get("json"))

    # 4. PUT multipart：表单字段与文件混合
    upload = Path(__file__)
    request = Request("https://httpbin.org/put")
    request.body.add_form_field("name", "example")
    request.body.add_form_raw_file("source", upload)
    response = request.put(transport)
    print(response.status_code, sorted(response.json().get("files", {})))

    # 5. 同一个 Request 可以重复发送，切换请求体类型只改变使用哪一组数据
    request.body.add_encoded_field("q", "courier")
    response = request.put(transport)
    print(response.json().get("form"))

    # 6. HTML 响应
    response = Request("https://httpbin.org/html").get(transport)
    print(response.is_html(), response.html().h1.get_text())

shutdown_logging()
