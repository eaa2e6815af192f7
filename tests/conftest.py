#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest 全局配置

提供：
- 共享 fixtures（出生信息、排盘结果、模型配置、模型接口替身）
- 环境变量隔离
"""

import pytest
import sys
import os

# 添加项目根目录到路径
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from server.config.env_config import reset_env_config  # noqa: E402
from server.models.life_kline import BirthInput, Gender  # noqa: E402
from tests.fixtures.life_kline_data import FakeModelEndpoint, make_chart, make_config  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """清掉会影响配置的环境变量，并在前后重置环境配置缓存"""
    for key in ("ENV", "APP_ENV", "LLM_API_KEY", "LLM_API_BASE_URL", "LLM_MODEL_NAME",
                "LLM_TEMPERATURE", "LLM_TIMEOUT", "LIFE_KLINE_SUBMISSION_ENABLED"):
        monkeypatch.delenv(key, raising=False)
    reset_env_config()
    yield
    reset_env_config()


# ==================== 数据 Fixtures ====================

@pytest.fixture(scope="function")
def sample_birth() -> BirthInput:
    """示例出生信息"""
    return BirthInput(year=1990, month=5, day=15, hour=14, minute=30, gender=Gender.MALE)


@pytest.fixture(scope="function")
def sample_chart():
    """固定排盘结果（1990 年生，8 岁起运，顺行）"""
    return make_chart()


@pytest.fixture(scope="function")
def llm_config():
    """可用的模型配置"""
    return make_config()


@pytest.fixture(scope="function")
def fake_endpoint() -> FakeModelEndpoint:
    """默认全部成功的模型接口替身"""
    return FakeModelEndpoint()
