#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
功能开关单元测试
"""

import pytest
import os
from unittest.mock import patch

import server.utils.feature_flag as feature_flag_module
from server.utils.exception_handler import ServiceUnavailableError
from server.utils.feature_flag import (
    SUBMISSION_FLAG,
    FeatureFlag,
    FeatureFlagManager,
    ensure_submission_open,
    get_feature_flag_manager,
)


class TestFeatureFlagManager:
    """功能开关管理器测试类"""

    def test_create_flag(self):
        """测试创建开关"""
        manager = FeatureFlagManager()
        manager.create_flag(FeatureFlag(name="新功能", description="新功能开关", enabled=True))

        retrieved = manager.get_flag("新功能")
        assert retrieved is not None
        assert retrieved.enabled is True
        assert retrieved.created_at is not None

    def test_toggle_flag(self):
        """测试切换开关"""
        manager = FeatureFlagManager()
        manager.create_flag(FeatureFlag(name="新功能", description="新功能开关", enabled=True))

        assert manager.is_enabled("新功能") is True
        assert manager.toggle_flag("新功能", False) is True
        assert manager.is_enabled("新功能") is False

    def test_unknown_flag(self):
        """测试不存在的开关"""
        manager = FeatureFlagManager()
        assert manager.is_enabled("不存在") is False
        assert manager.toggle_flag("不存在", True) is False


class TestSubmissionGate:
    """提交开关测试类"""

    @pytest.fixture(autouse=True)
    def reset_global_manager(self, monkeypatch):
        monkeypatch.setattr(feature_flag_module, "_feature_flag_manager", None)

    def test_open_by_default(self):
        manager = get_feature_flag_manager()
        assert manager.is_enabled(SUBMISSION_FLAG) is True
        ensure_submission_open(manager)

    def test_closed_from_env(self):
        with patch.dict(os.environ, {'LIFE_KLINE_SUBMISSION_ENABLED': 'false'}):
            manager = get_feature_flag_manager()

        with pytest.raises(ServiceUnavailableError) as exc:
            ensure_submission_open(manager)
        assert exc.value.code == 503
        assert "服务器繁忙" in exc.value.message

    def test_toggle_at_runtime(self):
        manager = get_feature_flag_manager()
        manager.toggle_flag(SUBMISSION_FLAG, False)
        with pytest.raises(ServiceUnavailableError):
            ensure_submission_open(manager)

    def test_singleton(self):
        assert get_feature_flag_manager() is get_feature_flag_manager()
