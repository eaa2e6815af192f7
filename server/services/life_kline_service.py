#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线生成服务

排盘结果 -> 4 个并发模型请求（命理总评 + 1-40 / 41-80 / 81-120 岁三个K线批次）
-> 容错解析 -> 合并为 120 条K线数据和一份总评。

任何一个请求失败（网络、空内容、解析、批次格式）整体失败，不返回部分结果。
总评中缺失或类型不对的字段按默认值补齐。
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Dict, List, Optional, Sequence

import httpx

from core.calculators.destiny_calculator import DestinyCalculator
from core.data.constants import year_ganzhi
from server.config.llm_config import LLMEndpointConfig
from server.models.life_kline import (
    AnalysisRecord,
    BaziChart,
    BirthInput,
    DestinyResult,
    TimelinePoint,
)
from server.services.model_gateway import request_completion
from server.utils.exception_handler import BatchShapeError
from server.utils.json_repair import parse_json_payload
from server.utils.prompts.life_kline import (
    TIMELINE_BATCHES,
    build_analysis_prompt,
    build_timeline_batch_prompt,
)

logger = logging.getLogger(__name__)

# 运势分值范围
SCORE_MIN = 0.0
SCORE_MAX = 100.0

DEFAULT_ANALYSIS_SCORE = 7
ANALYSIS_TEXT_DEFAULTS = {
    'summary': "命理分析完成",
    'industry': "事业运正常",
    'wealth': "财运平稳",
    'marriage': "婚姻顺遂",
    'health': "健康无虞",
    'family': "六亲和睦",
}
# 各评分字段的取值范围
ANALYSIS_SCORE_RANGES = {
    'summaryScore': (0, 10),
    'industryScore': (1, 10),
    'wealthScore': (1, 10),
    'marriageScore': (1, 10),
    'healthScore': (1, 10),
    'familyScore': (1, 10),
}


def _to_number(value: Any) -> Optional[float]:
    """数值或数字字符串 -> float；其他（含 bool、NaN、inf）返回 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _clamp_score(value: float) -> float:
    return _clamp(value, SCORE_MIN, SCORE_MAX)


async def gather_all_or_nothing(coros: Sequence[Awaitable[Any]]) -> List[Any]:
    """
    并发执行，全部成功才返回（顺序与入参一致）

    第一个异常出现时取消其余任务，等待它们收尾后抛出该异常。
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class LifeKLineService:
    """人生K线生成服务"""

    @staticmethod
    async def generate(
        birth: BirthInput,
        config: LLMEndpointConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> DestinyResult:
        """
        出生信息 -> 人生K线

        配置与排盘都在发出任何网络请求之前校验。

        Raises:
            ConfigurationError / InvalidDateError / ConversionError: 请求发出前
            GatewayError / EmptyResponseError / MalformedPayloadError / BatchShapeError: 任一请求失败
        """
        config = config.validate()
        chart = DestinyCalculator.calculate(birth)
        return await LifeKLineService.synthesize(chart, config, transport=transport)

    @staticmethod
    async def synthesize(
        chart: BaziChart,
        config: LLMEndpointConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> DestinyResult:
        """
        已排盘的八字 -> 人生K线

        Args:
            chart: 排盘结果
            config: 模型配置（会再次校验）
            transport: 可选的 httpx 传输层（测试时注入）

        Returns:
            DestinyResult: 120 条K线数据 + 命理总评
        """
        config = config.validate()

        logger.info("=== 开始生成人生K线 ===")
        logger.info(f"八字: {chart.pillars}, 起运: {chart.luck_cycle.start_age}岁, "
                    f"首运: {chart.luck_cycle.first_da_yun}, {chart.luck_cycle.direction.label}")

        async with httpx.AsyncClient(timeout=config.timeout, transport=transport) as client:
            analysis_data, *batches = await gather_all_or_nothing(
                [LifeKLineService.fetch_analysis(chart, config, client)]
                + [
                    LifeKLineService.fetch_batch(chart, config, client, start_age, end_age)
                    for start_age, end_age in TIMELINE_BATCHES
                ]
            )

        chart_data: List[TimelinePoint] = []
        for points in batches:
            chart_data.extend(points)

        logger.info(f"=== 完成！共 {len(chart_data)} 条数据 ===")

        return DestinyResult(
            chart_data=chart_data,
            analysis=LifeKLineService.build_analysis(analysis_data, chart),
        )

    @staticmethod
    async def fetch_analysis(
        chart: BaziChart,
        config: LLMEndpointConfig,
        client: httpx.AsyncClient,
    ) -> Dict[str, Any]:
        """请求命理总评"""
        content = await request_completion(config, build_analysis_prompt(chart), client)
        data = parse_json_payload(content)
        logger.info("命理分析完成")
        return data

    @staticmethod
    async def fetch_batch(
        chart: BaziChart,
        config: LLMEndpointConfig,
        client: httpx.AsyncClient,
        start_age: int,
        end_age: int,
    ) -> List[TimelinePoint]:
        """
        请求一个年龄区间的K线数据并整理为每岁一条

        Raises:
            BatchShapeError: chartPoints 不是非空数组，或条目不能覆盖区间内每一岁
        """
        prompt = build_timeline_batch_prompt(chart, start_age, end_age)
        content = await request_completion(config, prompt, client)
        data = parse_json_payload(content)

        chart_points = data.get('chartPoints')
        if not isinstance(chart_points, list) or not chart_points:
            logger.error(f"Invalid chartPoints for {start_age}-{end_age}: {str(data)[:200]}")
            raise BatchShapeError(start_age, end_age)

        points = LifeKLineService.reconcile_batch(chart, start_age, end_age, chart_points)
        logger.info(f"批次 {start_age}-{end_age} 完成: {len(points)} 条")
        return points

    @staticmethod
    def reconcile_batch(
        chart: BaziChart,
        start_age: int,
        end_age: int,
        raw_points: List[Any],
    ) -> List[TimelinePoint]:
        """
        把模型返回的一批数据整理为区间内每岁一条

        - 每条必须是带整数年龄的对象，且开盘价、收盘价可解析，否则整批失败
        - 年龄超出区间的条目丢弃；同一年龄重复时保留第一条
        - 区间内任何一岁缺失都整批失败，不补造数据

        Raises:
            BatchShapeError: 条目格式不对或未覆盖区间内每一岁
        """
        by_age: Dict[int, Dict[str, Any]] = {}
        for raw in raw_points:
            if not isinstance(raw, dict):
                logger.error(f"批次 {start_age}-{end_age} 含非对象条目: {str(raw)[:100]}")
                raise BatchShapeError(start_age, end_age)

            age_value = _to_number(raw.get('age'))
            if age_value is None or not age_value.is_integer():
                logger.error(f"批次 {start_age}-{end_age} 条目缺少有效年龄: {str(raw)[:100]}")
                raise BatchShapeError(start_age, end_age)

            age = int(age_value)
            if not start_age <= age <= end_age:
                logger.warning(f"批次 {start_age}-{end_age} 丢弃区间外条目: age={age}")
                continue
            if age in by_age:
                logger.warning(f"批次 {start_age}-{end_age} 丢弃重复条目: age={age}")
                continue
            by_age[age] = raw

        missing = [age for age in range(start_age, end_age + 1) if age not in by_age]
        if missing:
            logger.error(f"批次 {start_age}-{end_age} 缺少 {len(missing)} 条数据: {missing[:10]}")
            raise BatchShapeError(start_age, end_age)

        points: List[TimelinePoint] = []
        for age in range(start_age, end_age + 1):
            try:
                points.append(LifeKLineService.normalize_point(chart, age, by_age[age]))
            except ValueError as e:
                logger.error(f"批次 {start_age}-{end_age} 第 {age} 岁数据无效: {e}")
                raise BatchShapeError(start_age, end_age) from e
        return points

    @staticmethod
    def normalize_point(chart: BaziChart, age: int, raw: Dict[str, Any]) -> TimelinePoint:
        """
        规范化单条数据：数值截断到分值范围，high/low 覆盖 open/close，score 等于 close，
        年份、流年干支、大运按排盘结果重算

        收盘价无效时取 score（两者同值）；开盘价或收盘价都取不到则抛出 ValueError。
        """
        open_value = _to_number(raw.get('open'))
        if open_value is None:
            raise ValueError(f"open 无效: {raw.get('open')!r}")

        close_value = _to_number(raw.get('close'))
        if close_value is None:
            close_value = _to_number(raw.get('score'))
        if close_value is None:
            raise ValueError(f"close 无效: {raw.get('close')!r}")

        open_price = _clamp_score(open_value)
        close_price = _clamp_score(close_value)

        high_value = _to_number(raw.get('high'))
        high = max(open_price, close_price, _clamp_score(high_value) if high_value is not None else SCORE_MIN)

        low_value = _to_number(raw.get('low'))
        low = min(open_price, close_price, _clamp_score(low_value) if low_value is not None else SCORE_MAX)

        year = chart.birth_year + age - 1
        da_yun = chart.luck_cycle.decade_at(age) or str(raw.get('daYun') or '')
        reason = raw.get('reason')

        return TimelinePoint(
            age=age,
            year=year,
            da_yun=da_yun,
            gan_zhi=year_ganzhi(year),
            open=open_price,
            close=close_price,
            high=high,
            low=low,
            score=close_price,
            reason=str(reason) if reason is not None else '',
        )

    @staticmethod
    def build_analysis(data: Dict[str, Any], chart: BaziChart) -> AnalysisRecord:
        """
        组装命理总评，缺失或类型不对的字段使用默认值

        TODO: 默认值会掩盖模型输出异常，需要确认产品上是否改为报错
        """
        bazi = data.get('bazi')
        if not (isinstance(bazi, list) and len(bazi) == 4 and all(isinstance(p, str) and p for p in bazi)):
            bazi = chart.pillars.as_list()

        fields: Dict[str, Any] = {'bazi': bazi}
        for key, default in ANALYSIS_TEXT_DEFAULTS.items():
            value = data.get(key)
            fields[key] = value.strip() if isinstance(value, str) and value.strip() else default

        for key, (lower, upper) in ANALYSIS_SCORE_RANGES.items():
            value = _to_number(data.get(key))
            fields[key] = DEFAULT_ANALYSIS_SCORE if value is None else int(round(_clamp(value, lower, upper)))

        return AnalysisRecord.model_validate(fields)

