# -*- coding: utf-8 -*-
"""干支基础数据"""
