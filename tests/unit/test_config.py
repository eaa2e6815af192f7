#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置管理单元测试
测试环境配置与模型端点配置
"""

import pytest
import os
from unittest.mock import patch

from server.config.env_config import EnvConfig
from server.config.llm_config import DEFAULT_MODEL_NAME, LLMEndpointConfig
from server.utils.exception_handler import ConfigurationError


class TestEnvConfig:
    """环境配置测试类"""

    @pytest.mark.parametrize("value,expected", [
        ("production", "production"),
        ("prod", "production"),
        ("stage", "staging"),
        ("dev", "local"),
        ("whatever", "local"),
    ])
    def test_detect_environment(self, value, expected):
        """测试环境识别"""
        with patch.dict(os.environ, {'ENV': value}):
            assert EnvConfig().env == expected

    def test_typed_getters(self):
        """测试类型化读取"""
        with patch.dict(os.environ, {'A_BOOL': 'on', 'A_INT': 'x', 'A_FLOAT': '0.7'}):
            config = EnvConfig()
            assert config.get_bool_config('A_BOOL') is True
            assert config.get_int_config('A_INT', 5) == 5
            assert config.get_float_config('A_FLOAT') == 0.7
            assert config.get_float_config('MISSING_FLOAT') is None

    def test_required_config_missing(self):
        """测试必需配置缺失"""
        with pytest.raises(ValueError):
            EnvConfig().get_config('DEFINITELY_NOT_SET_KEY', required=True)


class TestLLMEndpointConfig:
    """模型端点配置测试类"""

    def test_from_env(self):
        """测试从环境变量创建配置"""
        with patch.dict(os.environ, {
            'LLM_API_KEY': 'sk-env',
            'LLM_API_BASE_URL': 'https://api.deepseek.com',
            'LLM_MODEL_NAME': 'deepseek-reasoner',
            'LLM_TEMPERATURE': '0.8',
            'LLM_TIMEOUT': '90',
        }):
            config = LLMEndpointConfig.from_env()

        assert config.api_key == 'sk-env'
        assert config.base_url == 'https://api.deepseek.com'
        assert config.model_name == 'deepseek-reasoner'
        assert config.temperature == 0.8
        assert config.timeout == 90.0

    def test_defaults(self):
        """测试默认值"""
        config = LLMEndpointConfig.from_env()
        assert config.api_key == ''
        assert config.model_name == DEFAULT_MODEL_NAME
        assert config.temperature == 0.6
        assert config.timeout is None

    def test_overrides_ignore_blank_values(self):
        """测试请求覆盖：空值不覆盖默认配置"""
        base = LLMEndpointConfig(api_key='sk-env', base_url='https://a.example.com')
        merged = base.with_overrides(api_key='sk-user', base_url='  ', model_name=None)
        assert merged.api_key == 'sk-user'
        assert merged.base_url == 'https://a.example.com'
        assert merged.model_name == DEFAULT_MODEL_NAME
        assert base.api_key == 'sk-env'

    def test_validate_normalizes(self):
        """测试校验与规范化"""
        config = LLMEndpointConfig(api_key=' sk ', base_url=' https://a.example.com/v1// ', model_name='  ').validate()
        assert config.api_key == 'sk'
        assert config.base_url == 'https://a.example.com/v1'
        assert config.model_name == DEFAULT_MODEL_NAME

    @pytest.mark.parametrize("kwargs,message", [
        ({'api_key': '', 'base_url': 'https://a.example.com'}, "API Key"),
        ({'api_key': 'sk', 'base_url': '   '}, "API Base URL"),
    ])
    def test_validate_missing(self, kwargs, message):
        """测试缺少必需配置"""
        with pytest.raises(ConfigurationError) as exc:
            LLMEndpointConfig(**kwargs).validate()
        assert message in exc.value.message
        assert exc.value.code == 400

    @pytest.mark.parametrize("temperature", [0.1, 0.9])
    def test_validate_temperature_range(self, temperature):
        """测试温度范围"""
        with pytest.raises(ConfigurationError):
            LLMEndpointConfig(api_key='sk', base_url='https://a.example.com', temperature=temperature).validate()
