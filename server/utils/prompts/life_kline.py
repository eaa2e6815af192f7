#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
人生K线 Prompt 构建

两类请求：
- 命理总评：四柱 + 性别 -> 总评与五个维度的文字和评分
- K线批次：四柱 + 大运信息 + 年龄区间 -> 该区间每岁一条K线数据

纯字符串模板，不含网络和解析逻辑。
"""

import json
from typing import Tuple

from server.models.life_kline import BaziChart

# 三个固定批次（含首尾）
TIMELINE_BATCHES: Tuple[Tuple[int, int], ...] = ((1, 40), (41, 80), (81, 120))


def build_analysis_prompt(chart: BaziChart) -> str:
    """
    构建命理总评 prompt

    Args:
        chart: 排盘结果

    Returns:
        str: prompt 文本
    """
    pillars = chart.pillars
    example = {
        "bazi": pillars.as_list(),
        "summary": "30字总评",
        "summaryScore": 6,
        "industry": "20字事业",
        "industryScore": 8,
        "wealth": "20字财运",
        "wealthScore": 4,
        "marriage": "20字婚姻",
        "marriageScore": 7,
        "health": "20字健康",
        "healthScore": 3,
        "family": "20字六亲",
        "familyScore": 9,
    }

    return f"""你是八字命理专家。八字：{pillars}，{chart.gender.label}命

只输出JSON：{json.dumps(example, ensure_ascii=False)}

【评分规则】每项评分为1-10的整数（summaryScore为0-10）：
- 9-10分：喜用神得力、格局清纯，该方面极为有利
- 7-8分：喜用有力，小有阻滞
- 5-6分：喜忌参半，平稳
- 3-4分：忌神偏旺，阻力明显
- 1-2分：忌神当令、刑冲严重，该方面极为不利

【重要】各项评分必须根据八字实际情况拉开差距，不要每项都给同一个分数，也不要默认给7分这样的中间值。"""


def build_timeline_batch_prompt(chart: BaziChart, start_age: int, end_age: int) -> str:
    """
    构建K线批次 prompt

    Args:
        chart: 排盘结果
        start_age: 起始年龄（含）
        end_age: 结束年龄（含）

    Returns:
        str: prompt 文本
    """
    count = end_age - start_age + 1
    birth_year = chart.birth_year
    luck_cycle = chart.luck_cycle
    example_point = {
        "age": start_age,
        "year": birth_year + start_age - 1,
        "daYun": "干支",
        "ganZhi": "干支",
        "open": 45,
        "close": 62,
        "high": 70,
        "low": 38,
        "score": 62,
        "reason": "10字",
    }
    example = json.dumps({"chartPoints": [example_point]}, ensure_ascii=False)
    # 提示模型数组需要继续写满
    example = example[:-2] + ',...]}'

    return f"""你是八字命理专家。生成 {start_age}-{end_age} 岁共 {count} 条K线数据。

八字：{chart.pillars}
出生：{birth_year}年，起运：{luck_cycle.start_age}岁，首运：{luck_cycle.first_da_yun}，{luck_cycle.direction.label}

只输出JSON：{example}

chartPoints 必须恰好 {count} 条，age 从 {start_age} 到 {end_age} 每岁一条，不重复不遗漏。

【重要】K线形态 - 区分度 (High Contrast)：
- **拒绝平均**：不要每年都差不多长！必须有长有短。
- **平稳年份 (70%)**：open和close非常接近 (差值 < 5)，K线很短，表示运势平稳。
- **转折年份 (30%)**：open和close差距极大 (差值 > 15-25)，K线很长，表示大起大落。
- **吉凶分明**：吉年(>70分)要长红（close远高于open），凶年(<40分)要长绿（close远低于open）。
- **制造疏密**：平稳期像一条线，动荡期像一根柱，视觉上要有明显的疏密节奏。

high ≥ max(open,close)，low ≤ min(open,close)，所有数值在0-100之间。
daYun每10年变，ganZhi每年变，reason≤10字，score=close值"""
