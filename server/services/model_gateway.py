#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
大模型网关 - OpenAI 兼容 chat/completions 单次调用

POST {base_url}/chat/completions，返回 choices[0].message.content 原文。
不重试、不缓存；超时由 LLMEndpointConfig.timeout 决定（默认不限制）。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from server.config.llm_config import LLMEndpointConfig
from server.utils.exception_handler import EmptyResponseError, GatewayError

logger = logging.getLogger(__name__)

BODY_EXCERPT_LIMIT = 200


def build_request_body(config: LLMEndpointConfig, prompt: str) -> Dict[str, Any]:
    return {
        "model": config.model_name,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": config.temperature,
        "response_format": {"type": "json_object"},
    }


def extract_content(data: Any) -> Optional[str]:
    """取 choices[0].message.content，结构不符时返回 None"""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


async def request_completion(
    config: LLMEndpointConfig,
    prompt: str,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    发送一次补全请求

    Args:
        config: 已校验的模型配置
        prompt: 提示词
        client: 复用的 httpx.AsyncClient；为空时临时创建

    Returns:
        str: 模型返回的文本

    Raises:
        GatewayError: 非 2xx 响应或网络传输失败
        EmptyResponseError: 成功响应中没有内容
    """
    if client is None:
        async with httpx.AsyncClient(timeout=config.timeout) as own_client:
            return await request_completion(config, prompt, own_client)

    url = f"{config.base_url}/chat/completions"
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config.api_key}",
    }
    logger.debug("Calling model endpoint: %s model=%s prompt_length=%d", url, config.model_name, len(prompt))

    try:
        response = await client.post(url, headers=headers, json=build_request_body(config, prompt))
    except httpx.HTTPError as exc:
        logger.error("Model endpoint transport error: %s", exc)
        raise GatewayError(f"API请求失败: {exc}") from exc

    if not response.is_success:
        excerpt = response.text[:BODY_EXCERPT_LIMIT]
        logger.error("Model endpoint returned %s: %s", response.status_code, excerpt)
        raise GatewayError(
            f"API错误 {response.status_code}: {excerpt}",
            status_code=response.status_code,
            body_excerpt=excerpt,
        )

    try:
        data = response.json()
    except ValueError:
        data = None

    content = extract_content(data)
    if not content:
        raise EmptyResponseError("模型未返回内容")

    logger.info("API response length: %d", len(content))
    return content
