#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tests/api/ 目录的 conftest：提供 client 和示例请求 fixtures
"""
import pytest

from fastapi.testclient import TestClient

from server.api.v1.life_kline import get_llm_config
from server.utils.feature_flag import (
    SUBMISSION_FLAG,
    FeatureFlag,
    FeatureFlagManager,
    get_feature_flag_manager,
)
from tests.fixtures.life_kline_data import make_config


@pytest.fixture
def flag_manager():
    """独立的开关管理器（提交开关默认打开）"""
    manager = FeatureFlagManager()
    manager.create_flag(FeatureFlag(name=SUBMISSION_FLAG, description="测试", enabled=True))
    return manager


@pytest.fixture
def client(flag_manager):
    """创建 FastAPI TestClient，注入测试用开关与模型配置"""
    from server.main import app

    app.dependency_overrides[get_feature_flag_manager] = lambda: flag_manager
    app.dependency_overrides[get_llm_config] = lambda: make_config()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_birth_request():
    """标准出生信息请求参数"""
    return {
        "year": 1990,
        "month": 6,
        "day": 15,
        "hour": 8,
        "minute": 0,
        "gender": "male",
    }
