# -*- coding: utf-8 -*-
"""排盘数据模型"""
