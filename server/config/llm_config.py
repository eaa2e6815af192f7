#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
大模型接口配置

兼容 OpenAI chat/completions 协议的模型端点配置。环境变量只提供默认值，
每次调用都显式传入配置，流水线内部不保存任何全局配置。
"""

from dataclasses import dataclass, replace
from typing import Optional

from server.config.env_config import get_env_config
from server.utils.exception_handler import ConfigurationError

DEFAULT_MODEL_NAME = "deepseek-chat"
DEFAULT_TEMPERATURE = 0.6
MIN_TEMPERATURE = 0.6
MAX_TEMPERATURE = 0.85


@dataclass(frozen=True)
class LLMEndpointConfig:
    """模型端点配置"""
    api_key: str = ""
    base_url: str = ""
    model_name: str = DEFAULT_MODEL_NAME
    temperature: float = DEFAULT_TEMPERATURE
    timeout: Optional[float] = None  # None 表示不限制，由调用方网络栈决定

    @classmethod
    def from_env(cls) -> 'LLMEndpointConfig':
        """从环境变量创建配置"""
        env_config = get_env_config()
        return cls(
            api_key=env_config.get_config('LLM_API_KEY', ''),
            base_url=env_config.get_config('LLM_API_BASE_URL', ''),
            model_name=env_config.get_config('LLM_MODEL_NAME', DEFAULT_MODEL_NAME),
            temperature=env_config.get_float_config('LLM_TEMPERATURE', DEFAULT_TEMPERATURE),
            timeout=env_config.get_float_config('LLM_TIMEOUT'),
        )

    def with_overrides(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_name: Optional[str] = None,
    ) -> 'LLMEndpointConfig':
        """用请求中的非空值覆盖默认配置"""
        changes = {}
        if api_key and api_key.strip():
            changes['api_key'] = api_key
        if base_url and base_url.strip():
            changes['base_url'] = base_url
        if model_name and model_name.strip():
            changes['model_name'] = model_name
        return replace(self, **changes)

    def validate(self) -> 'LLMEndpointConfig':
        """
        校验并规范化配置

        Returns:
            规范化后的新配置（去空白、去掉 base_url 末尾斜杠、补默认模型名）

        Raises:
            ConfigurationError: 缺少 API Key / Base URL，或温度超出范围
        """
        api_key = (self.api_key or '').strip()
        base_url = (self.base_url or '').strip()
        if not api_key:
            raise ConfigurationError("请填写 API Key")
        if not base_url:
            raise ConfigurationError("请填写 API Base URL")
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ConfigurationError(
                f"temperature 必须在 {MIN_TEMPERATURE}-{MAX_TEMPERATURE} 之间，当前为 {self.temperature}"
            )
        return replace(
            self,
            api_key=api_key,
            base_url=base_url.rstrip('/'),
            model_name=(self.model_name or '').strip() or DEFAULT_MODEL_NAME,
        )
