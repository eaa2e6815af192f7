#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线数据模型 - 统一的数据结构定义
"""

from server.models.life_kline import (
    Gender,
    LuckDirection,
    BirthInput,
    FourPillars,
    LuckPillar,
    LuckCycle,
    BaziChart,
    TimelinePoint,
    AnalysisRecord,
    DestinyResult,
)

__all__ = [
    'Gender',
    'LuckDirection',
    'BirthInput',
    'FourPillars',
    'LuckPillar',
    'LuckCycle',
    'BaziChart',
    'TimelinePoint',
    'AnalysisRecord',
    'DestinyResult',
]
