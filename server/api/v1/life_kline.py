#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线 API
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from core.calculators.destiny_calculator import DestinyCalculator
from server.config.llm_config import LLMEndpointConfig
from server.models.life_kline import BaziChart, BirthInput, DestinyResult
from server.services.life_kline_service import LifeKLineService
from server.utils.exception_handler import api_error_handler
from server.utils.feature_flag import (
    FeatureFlagManager,
    ensure_submission_open,
    get_feature_flag_manager,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class LifeKLineRequest(BirthInput):
    """人生K线生成请求：出生信息 + 可选的模型配置（不填则使用服务端环境变量）"""
    api_key: Optional[str] = Field(None, description="模型 API Key（可选）")
    api_base_url: Optional[str] = Field(None, description="模型 API Base URL（可选），如 https://api.deepseek.com")
    model_name: Optional[str] = Field(None, description="模型名称（可选），默认 deepseek-chat")

    @field_validator('api_base_url')
    @classmethod
    def validate_base_url(cls, v):
        """只接受 http/https 地址"""
        if v and v.strip() and not v.strip().lower().startswith(('http://', 'https://')):
            raise ValueError('API Base URL 必须以 http:// 或 https:// 开头')
        return v


class BaziChartResponse(BaseModel):
    """排盘响应"""
    success: bool = True
    data: BaziChart


class LifeKLineResponse(BaseModel):
    """人生K线响应"""
    success: bool = True
    data: DestinyResult


def get_llm_config() -> LLMEndpointConfig:
    """服务端默认模型配置"""
    return LLMEndpointConfig.from_env()


@router.post("/life-kline/bazi", response_model=BaziChartResponse, summary="排盘：四柱与大运")
@api_error_handler
async def calculate_bazi(request: BirthInput):
    """
    公历出生时间 -> 四柱八字、起运年龄、大运顺逆与各步大运（不调用大模型）
    """
    chart = DestinyCalculator.calculate(request)
    return BaziChartResponse(data=chart)


@router.post("/life-kline/generate", response_model=LifeKLineResponse, summary="生成人生K线")
@api_error_handler
async def generate_life_kline(
    request: LifeKLineRequest,
    flags: FeatureFlagManager = Depends(get_feature_flag_manager),
    default_config: LLMEndpointConfig = Depends(get_llm_config),
):
    """
    生成 1-120 岁人生K线与命理总评

    - 提交开关关闭时返回 503
    - 日期不存在返回 400；缺少 API Key / Base URL 返回 400
    - 任一模型请求失败返回 502，不返回部分结果
    """
    ensure_submission_open(flags)

    config = default_config.with_overrides(
        api_key=request.api_key,
        base_url=request.api_base_url,
        model_name=request.model_name,
    )
    birth = BirthInput(**request.model_dump(include=set(BirthInput.model_fields)))

    logger.info(f"人生K线请求: {birth.year}-{birth.month}-{birth.day} {birth.hour}:{birth.minute} {birth.gender.value}")
    result = await LifeKLineService.generate(birth, config)
    return LifeKLineResponse(data=result)
