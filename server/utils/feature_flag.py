#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
功能开关（Feature Flag）

人生K线的提交开关：关闭后 API 层直接拒绝生成请求（服务繁忙、API 拥堵时的紧急开关）。
生成流水线本身不读取任何开关。
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from server.config.env_config import get_env_config
from server.utils.exception_handler import ServiceUnavailableError

logger = logging.getLogger(__name__)

# 人生K线提交开关
SUBMISSION_FLAG = "life_kline_submission"
SUBMISSION_CLOSED_MESSAGE = "当前服务器繁忙，使用的用户过多导致API堵塞，请择时再来"


@dataclass
class FeatureFlag:
    """功能开关配置"""
    name: str                  # 开关名称
    description: str           # 描述
    enabled: bool              # 是否启用
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class FeatureFlagManager:
    """功能开关管理器"""

    def __init__(self, storage_backend=None):
        """
        初始化功能开关管理器

        Args:
            storage_backend: 存储后端，默认使用内存
        """
        self._storage = storage_backend or InMemoryFlagStorage()

    def _save(self, flag: FeatureFlag):
        self._storage.save_flag(flag.name, {
            'name': flag.name,
            'description': flag.description,
            'enabled': flag.enabled,
            'created_at': flag.created_at,
            'updated_at': flag.updated_at
        })

    def create_flag(self, flag: FeatureFlag) -> None:
        """创建功能开关（同名覆盖）"""
        now = datetime.now().isoformat()
        if not flag.created_at:
            flag.created_at = now
        flag.updated_at = now
        self._save(flag)
        logger.info(f"创建功能开关: {flag.name} enabled={flag.enabled}")

    def get_flag(self, name: str) -> Optional[FeatureFlag]:
        """获取功能开关"""
        data = self._storage.load_flag(name)
        if not data:
            return None
        return FeatureFlag(
            name=data['name'],
            description=data['description'],
            enabled=data['enabled'],
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )

    def is_enabled(self, flag_name: str) -> bool:
        """检查功能开关是否启用，不存在的开关视为关闭"""
        flag = self.get_flag(flag_name)
        return bool(flag and flag.enabled)

    def toggle_flag(self, flag_name: str, enabled: bool) -> bool:
        """切换开关状态，开关不存在时返回 False"""
        flag = self.get_flag(flag_name)
        if not flag:
            return False
        flag.enabled = enabled
        flag.updated_at = datetime.now().isoformat()
        self._save(flag)
        logger.info(f"切换功能开关: {flag_name} -> {enabled}")
        return True


class InMemoryFlagStorage:
    """内存存储后端"""

    def __init__(self):
        self._flags = {}

    def save_flag(self, name: str, data: dict):
        self._flags[name] = data

    def load_flag(self, name: str) -> Optional[dict]:
        return self._flags.get(name)


def ensure_submission_open(manager: FeatureFlagManager) -> None:
    """
    提交前检查开关

    Raises:
        ServiceUnavailableError: 开关关闭
    """
    if not manager.is_enabled(SUBMISSION_FLAG):
        raise ServiceUnavailableError(SUBMISSION_CLOSED_MESSAGE, service="life_kline")


# 全局实例
_feature_flag_manager: Optional[FeatureFlagManager] = None


def get_feature_flag_manager() -> FeatureFlagManager:
    """获取全局功能开关管理器，首次创建时按 LIFE_KLINE_SUBMISSION_ENABLED 初始化提交开关"""
    global _feature_flag_manager
    if _feature_flag_manager is None:
        manager = FeatureFlagManager()
        manager.create_flag(FeatureFlag(
            name=SUBMISSION_FLAG,
            description="人生K线生成提交开关",
            enabled=get_env_config().get_bool_config('LIFE_KLINE_SUBMISSION_ENABLED', default=True),
        ))
        _feature_flag_manager = manager
    return _feature_flag_manager
