"""
단위별 집계기 (aggregation/aggregator)
-----------------------------------------------------
행마다 ㎡ 환산 기여분(calc_m2)을 계산하고, 단위별 수량 합계와 ㎡ 환산 합계를 누적합니다.

㎡ 환산 규칙 (정규화 단위 기준)
- ㎡   : 수량 그대로
- m    : 수량 × suggested_input (m)
- 段   : 수량 × suggested_input (㎡/段), 텍스트에 踏面 이 있으면 2배
- 그 외: 행별 수동 입력값(㎡/단위)이 있을 때만 수량 × 입력값, 없으면 합계에서 제외

행별 수동 입력값(override)이 있으면 m/段 행에서도 suggested_input 대신 사용합니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

from sheet_takeoff.models.envelopes import SizeResult
from sheet_takeoff.services.reference.lexicon import (
    UNIT_M,
    UNIT_M2,
    UNIT_STEP,
    Lexicon,
    get_default_lexicon,
)

logger = logging.getLogger(__name__)


def compute_calc_m2(
    unit: str,
    qty: Optional[float],
    size: SizeResult,
    text: str = "",
    override: Optional[float] = None,
    lexicon: Optional[Lexicon] = None,
) -> Optional[float]:
    """한 행의 ㎡ 환산 기여분 (합계 대상이 아니면 None)"""
    if qty is None:
        return None
    if unit == UNIT_M2:
        return qty

    per_unit = override if override is not None else size.suggested_input

    if unit == UNIT_M:
        return qty * per_unit if per_unit is not None else None

    if unit == UNIT_STEP:
        if per_unit is None:
            return None
        lex = lexicon or get_default_lexicon()
        factor = 2.0 if any(k in (text or "") for k in lex.tread_keywords) else 1.0
        return qty * per_unit * factor

    if override is not None:
        return qty * override
    return None


@dataclass
class RowAggregate:
    """한 행의 집계 입력"""

    qty: float
    unit: str
    size: SizeResult = field(default_factory=SizeResult)
    calc_m2: Optional[float] = None


class UnitAggregator:
    """단위별 수량 합계 + ㎡ 환산 합계 누적기"""

    def __init__(self):
        self.sums_by_unit: Dict[str, float] = {}
        self.sum_m2: float = 0.0
        self.count = 0

    def add(self, row: RowAggregate) -> None:
        self.count += 1
        if row.unit:
            self.sums_by_unit[row.unit] = self.sums_by_unit.get(row.unit, 0.0) + row.qty
        if row.calc_m2 is not None:
            self.sum_m2 += row.calc_m2
