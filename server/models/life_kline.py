#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线数据模型 - K线数据点、命理分析、完整结果

出生信息、四柱、大运等排盘模型定义在 core.models.bazi_chart，这里一并导出。
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from core.models.bazi_chart import (  # noqa: F401
    BaziChart,
    BirthInput,
    FourPillars,
    Gender,
    LuckCycle,
    LuckDirection,
    LuckPillar,
)


class TimelinePoint(BaseModel):
    """单年K线数据点"""
    model_config = ConfigDict(populate_by_name=True)

    age: int
    year: int
    da_yun: str = Field(..., alias="daYun")
    gan_zhi: str = Field(..., alias="ganZhi")
    open: float
    close: float
    high: float
    low: float
    score: float
    reason: str = ""


class AnalysisRecord(BaseModel):
    """命理总评"""
    model_config = ConfigDict(populate_by_name=True)

    bazi: List[str]
    summary: str
    summary_score: int = Field(..., alias="summaryScore", ge=0, le=10)
    industry: str
    industry_score: int = Field(..., alias="industryScore", ge=1, le=10)
    wealth: str
    wealth_score: int = Field(..., alias="wealthScore", ge=1, le=10)
    marriage: str
    marriage_score: int = Field(..., alias="marriageScore", ge=1, le=10)
    health: str
    health_score: int = Field(..., alias="healthScore", ge=1, le=10)
    family: str
    family_score: int = Field(..., alias="familyScore", ge=1, le=10)


class DestinyResult(BaseModel):
    """人生K线完整结果"""
    model_config = ConfigDict(populate_by_name=True)

    chart_data: List[TimelinePoint] = Field(..., alias="chartData")
    analysis: AnalysisRecord
