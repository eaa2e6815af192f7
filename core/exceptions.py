#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘层业务异常

core 只依赖标准库与 pydantic；server 层在此基础上扩展其余异常，并负责转换为 HTTP 响应。
"""


class BusinessError(Exception):
    """
    业务异常基类

    用于表示业务逻辑错误，与系统错误区分开来。
    """
    def __init__(self, message: str, code: int = 400, error_type: str = "business_error"):
        self.message = message
        self.code = code
        self.error_type = error_type
        super().__init__(message)


class InvalidDateError(BusinessError):
    """出生日期不存在（如 2023-02-30）或超出 1900-2100"""
    def __init__(self, message: str):
        super().__init__(message, code=400, error_type="invalid_date")


class ConversionError(BusinessError):
    """历法库转换失败"""
    def __init__(self, message: str):
        super().__init__(message, code=422, error_type="conversion_error")
