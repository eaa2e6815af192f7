#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线排盘器

公历出生时间 + 性别 -> 四柱八字 + 大运（起运年龄、顺逆、各步大运干支）。
纯计算，无 I/O；同样的输入永远得到同样的输出。
"""

import datetime
import logging
from typing import List

from lunar_python import Solar

from core.data.constants import UNKNOWN_PILLAR, get_stem_polarity
from core.exceptions import ConversionError, InvalidDateError
from core.models.bazi_chart import (
    BaziChart,
    BirthInput,
    FourPillars,
    Gender,
    LuckCycle,
    LuckDirection,
    LuckPillar,
)

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100

# 起运前 1 步 + 12 步大运，足以覆盖 120 岁
DA_YUN_STEPS = 13


class DestinyCalculator:
    """排盘工具类 - 四柱与大运"""

    @staticmethod
    def is_valid_date(year: int, month: int, day: int) -> bool:
        """年份在 1900-2100 之间，且年月日组合真实存在"""
        if not MIN_YEAR <= year <= MAX_YEAR:
            return False
        try:
            datetime.date(year, month, day)
        except ValueError:
            return False
        return True

    @staticmethod
    def normalize_time(hour: int, minute: int):
        """时分截断到 0-23 / 0-59"""
        safe_hour = max(0, min(23, hour or 0))
        safe_minute = max(0, min(59, minute or 0))
        return safe_hour, safe_minute

    @staticmethod
    def get_luck_direction(gender: Gender, year_pillar: str) -> LuckDirection:
        """
        大运顺逆：阳男阴女顺行，阴男阳女逆行

        Args:
            gender: 性别
            year_pillar: 年柱干支

        Returns:
            LuckDirection
        """
        polarity = get_stem_polarity(year_pillar)
        if gender == Gender.MALE:
            forward = polarity == 'YANG'
        else:
            forward = polarity == 'YIN'
        return LuckDirection.FORWARD if forward else LuckDirection.REVERSE

    @staticmethod
    def pick_first_da_yun(decades: List[LuckPillar]) -> str:
        """
        首步大运：第 1 步（第 0 步为起运前），取不到时退回第 0 步，仍取不到则为“未知”
        """
        by_index = {d.index: d.ganzhi for d in decades if d.ganzhi}
        if 1 in by_index:
            return by_index[1]
        if 0 in by_index:
            return by_index[0]
        return UNKNOWN_PILLAR

    @staticmethod
    def calculate(birth: BirthInput) -> BaziChart:
        """
        排盘

        Args:
            birth: 出生信息

        Returns:
            BaziChart: 四柱、年干阴阳、大运

        Raises:
            InvalidDateError: 日期不存在或超出 1900-2100
            ConversionError: 历法库转换失败
        """
        if not DestinyCalculator.is_valid_date(birth.year, birth.month, birth.day):
            raise InvalidDateError(f"日期 {birth.year}年{birth.month}月{birth.day}日 不存在，请检查输入")

        hour, minute = DestinyCalculator.normalize_time(birth.hour, birth.minute)

        try:
            solar = Solar.fromYmdHms(birth.year, birth.month, birth.day, hour, minute, 0)
            eight_char = solar.getLunar().getEightChar()

            pillars = FourPillars(
                year_pillar=eight_char.getYear(),
                month_pillar=eight_char.getMonth(),
                day_pillar=eight_char.getDay(),
                hour_pillar=eight_char.getTime(),
            )

            # lunar_python: 1 = 男, 0 = 女
            yun = eight_char.getYun(1 if birth.gender == Gender.MALE else 0)
            decades = [
                LuckPillar(
                    index=da_yun.getIndex(),
                    ganzhi=da_yun.getGanZhi() or '',
                    start_age=da_yun.getStartAge(),
                    end_age=da_yun.getEndAge(),
                    start_year=da_yun.getStartYear(),
                    end_year=da_yun.getEndYear(),
                )
                for da_yun in yun.getDaYun(DA_YUN_STEPS)
                if da_yun is not None
            ]
            start_age = yun.getStartYear()
            start_month = yun.getStartMonth()
            start_day = yun.getStartDay()
        except Exception as e:
            logger.error(f"八字计算失败: {birth.year}-{birth.month}-{birth.day} {hour}:{minute}: {e}")
            raise ConversionError(f"八字计算失败: {e}") from e

        luck_cycle = LuckCycle(
            start_age=start_age,
            start_month=start_month,
            start_day=start_day,
            direction=DestinyCalculator.get_luck_direction(birth.gender, pillars.year_pillar),
            first_da_yun=DestinyCalculator.pick_first_da_yun(decades),
            decades=decades,
        )

        return BaziChart(
            birth_year=birth.year,
            gender=birth.gender,
            pillars=pillars,
            year_stem_polarity=get_stem_polarity(pillars.year_pillar),
            luck_cycle=luck_cycle,
        )


def resolve_birth_chart(birth: BirthInput) -> BaziChart:
    """排盘（便捷函数）"""
    return DestinyCalculator.calculate(birth)
