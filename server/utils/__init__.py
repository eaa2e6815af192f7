# -*- coding: utf-8 -*-
"""
服务器工具模块
"""

from .exception_handler import BusinessError, api_error_handler

__all__ = [
    'BusinessError', 'api_error_handler',
]
