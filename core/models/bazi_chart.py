#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘数据模型 - 出生信息、四柱、大运
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    """性别"""
    MALE = "male"
    FEMALE = "female"

    @property
    def label(self) -> str:
        return "男" if self is Gender.MALE else "女"


class LuckDirection(str, Enum):
    """大运顺逆"""
    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def label(self) -> str:
        return "顺行" if self is LuckDirection.FORWARD else "逆行"


class BirthInput(BaseModel):
    """出生信息（公历）"""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., description="出生年（1900-2100）", examples=[1990])
    month: int = Field(..., description="出生月（1-12）", examples=[5])
    day: int = Field(..., description="出生日", examples=[15])
    hour: int = Field(0, description="出生时（0-23，超出范围会被截断）", examples=[14])
    minute: int = Field(0, description="出生分（0-59，超出范围会被截断）", examples=[30])
    gender: Gender = Field(..., description="性别：male(男) 或 female(女)")
    name: Optional[str] = Field(None, description="姓名（可选）")
    birth_place: Optional[str] = Field(None, description="出生地（可选）")


class FourPillars(BaseModel):
    """四柱八字"""
    model_config = ConfigDict(frozen=True)

    year_pillar: str = Field(..., description="年柱", examples=["庚午"])
    month_pillar: str = Field(..., description="月柱", examples=["辛巳"])
    day_pillar: str = Field(..., description="日柱", examples=["庚辰"])
    hour_pillar: str = Field(..., description="时柱", examples=["癸未"])

    def as_list(self) -> List[str]:
        return [self.year_pillar, self.month_pillar, self.day_pillar, self.hour_pillar]

    def __str__(self) -> str:
        return " ".join(self.as_list())


class LuckPillar(BaseModel):
    """单步大运（年龄按虚岁计，出生当年为 1 岁）"""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., description="大运序号，0 为起运前")
    ganzhi: str = Field(..., description="大运干支，起运前为空字符串")
    start_age: int
    end_age: int
    start_year: int
    end_year: int


class LuckCycle(BaseModel):
    """大运信息"""
    model_config = ConfigDict(frozen=True)

    start_age: int = Field(..., description="起运年龄（岁）")
    start_month: int = Field(0, description="起运偏移月数")
    start_day: int = Field(0, description="起运偏移天数")
    direction: LuckDirection
    first_da_yun: str = Field(..., description="首步大运干支，取不到时为“未知”")
    decades: List[LuckPillar] = Field(default_factory=list)

    @property
    def da_yun_list(self) -> List[str]:
        """所有有干支的大运"""
        return [d.ganzhi for d in self.decades if d.ganzhi]

    def decade_at(self, age: int) -> Optional[str]:
        """指定年龄所在大运的干支；起运前或超出范围返回 None"""
        for decade in self.decades:
            if decade.ganzhi and decade.start_age <= age <= decade.end_age:
                return decade.ganzhi
        return None


class BaziChart(BaseModel):
    """排盘结果：四柱 + 大运"""
    model_config = ConfigDict(frozen=True)

    birth_year: int
    gender: Gender
    pillars: FourPillars
    year_stem_polarity: str = Field(..., description="年干阴阳：YANG / YIN")
    luck_cycle: LuckCycle
