# -*- coding: utf-8 -*-
"""
配置模块
"""

from .env_config import get_env_config, is_local_dev, is_production

__all__ = ['get_env_config', 'is_local_dev', 'is_production']
