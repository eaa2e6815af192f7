#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
大模型输出 JSON 容错解析

模型输出偶尔会带前后说明文字，或在 token 上限处被截断。按顺序尝试：
1. 直接解析
2. 截取第一个 '{' 到最后一个 '}' 再解析
3. 去掉末尾逗号，按未闭合的 '[' / '{' 数量补齐 ']' 与 '}' 再解析
直接解析得到的不是对象（如数组）时，同样改用第 2 步截取其中的对象，不再做第 3 步。
三步都失败则抛出 MalformedPayloadError。
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from server.utils.exception_handler import MalformedPayloadError

logger = logging.getLogger(__name__)

_BRACE_SPAN = re.compile(r'\{[\s\S]*\}')
_TRAILING_COMMA = re.compile(r',\s*$')


def parse_direct(content: str) -> Optional[Any]:
    """第一步：整体解析，失败返回 None"""
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        return None


def parse_brace_span(content: str) -> Optional[Any]:
    """第二步：取第一个 '{' 到最后一个 '}' 之间的内容解析，失败返回 None"""
    match = _BRACE_SPAN.search(content)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except ValueError:
        return None


def repair_truncated(content: str) -> str:
    """
    第三步的修复：去掉末尾悬挂的逗号，再依次补齐缺失的 ']' 和 '}'

    括号按全文计数，不区分是否位于字符串内。
    """
    open_brackets = content.count('[')
    close_brackets = content.count(']')
    open_braces = content.count('{')
    close_braces = content.count('}')

    fixed = _TRAILING_COMMA.sub('', content)
    fixed += ']' * max(0, open_brackets - close_brackets)
    fixed += '}' * max(0, open_braces - close_braces)
    return fixed


def parse_json_payload(content: str) -> Dict[str, Any]:
    """
    容错解析模型输出

    Args:
        content: 模型返回的原始文本

    Returns:
        解析后的 JSON 对象

    Raises:
        MalformedPayloadError: 修复后仍无法解析，或解析结果不是 JSON 对象
    """
    result = parse_direct(content)
    if result is None:
        logger.warning("Direct parse failed, trying to fix...")
        result = parse_brace_span(content)
    elif not isinstance(result, dict):
        # 合法 JSON 但不是对象（如外层包了数组），尝试取其中的对象
        logger.warning(f"Direct parse returned {type(result).__name__}, looking for an embedded object")
        result = parse_brace_span(content)
        if result is None:
            raise MalformedPayloadError("模型返回的 JSON 不是对象，且其中没有可解析的对象")
    if result is None:
        logger.warning("Extracted JSON parse failed, repairing truncated content")
        try:
            result = json.loads(repair_truncated(content))
        except ValueError as e:
            raise MalformedPayloadError(f"模型返回内容无法解析为 JSON: {e}") from e

    if not isinstance(result, dict):
        raise MalformedPayloadError(f"模型返回的 JSON 不是对象: {type(result).__name__}")
    return result
