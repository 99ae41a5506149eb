"""
Query 参数模块
从 URL 中拆出 Query 参数，发送时再编码拼接回 URL
"""

from collections.abc import Mapping, Sequence

from courier.api.encoder import encode_pairs


def split_query(url: str) -> tuple[str, list[tuple[str, str]]]:
    """
    拆分 URL 与 Query 参数

    第一个 ? 之后的内容按 & 分段，每段以第一个 = 分隔 key 与 value（不做解码）；
    没有 = 的段 value 为空字符串，空段忽略。

    Returns:
        (去掉 Query 的 URL, 按出现顺序排列的 (key, value) 列表)
    """
    base, sep, query = url.partition("?")
    if not sep:
        return url, []

    pairs: list[tuple[str, str]] = []
    for segment in query.split("&"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        pairs.append((key, value))
    return base, pairs


def merge_pairs(
    params: dict[str, list[str]], pairs: Sequence[tuple[str, str]]
) -> dict[str, list[str]]:
    """按顺序把 (key, value) 追加到参数表中"""
    for key, value in pairs:
        params.setdefault(key, []).append(value)
    return params


def build_url(base: str, params: Mapping[str, Sequence[str]], charset: str) -> str:
    """拼接编码后的 Query 参数；参数为空时不追加 ?"""
    query = encode_pairs(params, charset)
    if not query:
        return base
    return f"{base}?{query}"
