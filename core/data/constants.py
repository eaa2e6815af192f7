#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
干支常量定义

十天干、十二地支，以及阳干集合（用于判断年干阴阳、大运顺逆）。
"""

from typing import Literal

# 十天干
HEAVENLY_STEMS = ('甲', '乙', '丙', '丁', '戊', '己', '庚', '辛', '壬', '癸')

# 十二地支
EARTHLY_BRANCHES = ('子', '丑', '寅', '卯', '辰', '巳', '午', '未', '申', '酉', '戌', '亥')

# 阳干（其余为阴干）
YANG_STEMS = frozenset({'甲', '丙', '戊', '庚', '壬'})

StemPolarity = Literal['YANG', 'YIN']

# 大运无法取得时的占位干支
UNKNOWN_PILLAR = '未知'


def get_stem_polarity(pillar: str) -> StemPolarity:
    """
    根据干支首字判断天干阴阳

    Args:
        pillar: 干支，如 '甲子'

    Returns:
        'YANG' 或 'YIN'；空字符串按阳干处理
    """
    if not pillar or not pillar.strip():
        return 'YANG'
    return 'YANG' if pillar.strip()[0] in YANG_STEMS else 'YIN'


def year_ganzhi(year: int) -> str:
    """
    公历年份对应的流年干支（以立春后的干支年计，1984 为甲子）

    Args:
        year: 公历年份

    Returns:
        两字干支
    """
    offset = year - 4
    return HEAVENLY_STEMS[offset % 10] + EARTHLY_BRANCHES[offset % 12]


def is_valid_pillar(pillar: str) -> bool:
    """是否为合法的两字干支（天干 + 地支）"""
    return (
        isinstance(pillar, str)
        and len(pillar) == 2
        and pillar[0] in HEAVENLY_STEMS
        and pillar[1] in EARTHLY_BRANCHES
    )
