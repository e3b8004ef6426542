"""파이프라인 Envelope 모델

치수 추출 결과(SizeResult), 오라클 요청/응답 항목, 그리고 단계별(열 판정/집계)
데이터와 메타데이터를 타입 안전하게 관리하는 Pydantic 모델 정의.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar
from typing_extensions import TypeAlias

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# 기본 타입 정의
# =============================================================================

Stage: TypeAlias = Literal['classify', 'extract', 'enrich', 'aggregate']
"""파이프라인 처리 단계"""

TData = TypeVar('TData')
TMeta = TypeVar('TMeta')

MM_MIN = 0
MM_MAX = 999_999

SIZE_FIELDS = ('height_mm', 'wide_mm', 'length_mm', 'overlap_mm')
"""치수(mm) 필드 이름. 처리 순서와 동일."""


def clamp_mm(value: float) -> int:
    """mm 값을 정수로 반올림하고 [0, 999999] 범위로 제한

    무한대는 범위 끝으로 포화시키고, NaN 은 0 (없음) 으로 본다.
    """
    if math.isnan(value):
        return MM_MIN
    if math.isinf(value):
        return MM_MAX if value > 0 else MM_MIN
    v = int(round(value))
    if v < MM_MIN:
        return MM_MIN
    if v > MM_MAX:
        return MM_MAX
    return v


class Envelope(BaseModel, Generic[TData, TMeta]):
    """파이프라인 단계별 데이터와 메타데이터를 감싸는 공통 Envelope 모델"""
    stage: Stage
    data: TData
    meta: TMeta
    version: str = '1.0'


# =============================================================================
# 치수 결과 모델
# =============================================================================

class SizeResult(BaseModel):
    """한 행의 치수 추출 결과

    모든 필드는 "모름"일 때 None 이며, 0 으로 "모름"을 표현하지 않는다.
    """
    height_mm: Optional[int] = Field(default=None, description="높이/立上り (mm)")
    wide_mm: Optional[int] = Field(default=None, description="폭/W (mm)")
    length_mm: Optional[int] = Field(default=None, description="길이/L (mm)")
    overlap_mm: Optional[int] = Field(default=None, description="겹침/重ね (mm), 항상 > 0")
    suggested_input: Optional[float] = Field(
        default=None, description="단위별 환산값 (m 행: m, 그 외: ㎡/단위)"
    )
    calc_m2: Optional[float] = Field(default=None, description="행의 ㎡ 환산 기여분")

    def has_any_size(self) -> bool:
        return any(getattr(self, name) is not None for name in SIZE_FIELDS)

    def size_values(self) -> Dict[str, int]:
        """값이 있는 치수 필드만 dict 로 반환"""
        return {name: getattr(self, name) for name in SIZE_FIELDS if getattr(self, name) is not None}


class PendingExtraction(BaseModel):
    """오라클 요청 항목 (작업 버퍼 내 행 번호 + 원문)"""
    id: int = Field(description="작업 버퍼 내 행 인덱스")
    text: str = Field(description="치수 추출 대상 원문")
    unit: str = Field(description="정규화된 단위")
    qty: float = Field(description="행 수량")


class OracleResponseItem(BaseModel):
    """오라클 응답의 단일 항목

    잘못된 항목은 ValidationError 로 개별 폐기된다.
    """
    id: int
    heightMm: Optional[float] = Field(default=None, allow_inf_nan=False)
    wideMm: Optional[float] = Field(default=None, allow_inf_nan=False)
    lengthMm: Optional[float] = Field(default=None, allow_inf_nan=False)
    overlapMm: Optional[float] = Field(default=None, allow_inf_nan=False)
    suggestedInput: Optional[float] = Field(default=None, allow_inf_nan=False)
    calcM2: Optional[float] = Field(default=None, allow_inf_nan=False)

    @field_validator('id', mode='before')
    @classmethod
    def _reject_bool_id(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError('id must be an integer')
        return v

    def to_size_result(self) -> SizeResult:
        """오라클이 준 필드만 옮긴다 (0 이하 값은 합성하지 않음).

        suggestedInput/calcM2 는 의도적으로 옮기지 않는다 (항상 로컬 재계산).
        """
        out = SizeResult()
        for src, dst in (
            ('heightMm', 'height_mm'),
            ('wideMm', 'wide_mm'),
            ('lengthMm', 'length_mm'),
            ('overlapMm', 'overlap_mm'),
        ):
            raw = getattr(self, src)
            if raw is None:
                continue
            v = clamp_mm(raw)
            if v > 0:
                setattr(out, dst, v)
        return out


# =============================================================================
# 열 판정 단계 모델
# =============================================================================

class DetectedColumns(BaseModel):
    """열 판정 결과 (1-based, 외부 계약)"""
    item: int
    desc: int
    qty: int
    unit: int
    amount: Optional[int] = None
    size: int = Field(description="치수 추출 원문 열 (기본: desc)")
    header_row_index: Optional[int] = Field(default=None, description="1-based 헤더 행")
    used_manual_columns: bool = False


class ClassifyMeta(BaseModel):
    """열 판정 단계 메타데이터"""
    scanned_rows: int = 0
    scanned_cols: int = 0
    notes: List[str] = Field(default_factory=list, description="판정 근거 로그")


# =============================================================================
# 집계 단계 모델
# =============================================================================

class TakeoffRow(BaseModel):
    """결과 미리보기 한 행"""
    row_index: int = Field(description="원본 그리드의 1-based 행 번호")
    item: Optional[str] = None
    desc: Optional[str] = None
    qty: Optional[float] = None
    unit: Optional[str] = None
    amount: Optional[float] = None
    size_text: Optional[str] = None
    height_mm: Optional[int] = None
    wide_mm: Optional[int] = None
    length_mm: Optional[int] = None
    overlap_mm: Optional[int] = None
    suggested_input: Optional[float] = None
    calc_m2: Optional[float] = None


class AggregateData(BaseModel):
    """집계 단계 결과 데이터"""
    sums_by_unit: Dict[str, float] = Field(default_factory=dict, description="단위별 수량 합계")
    sum_m2: float = Field(default=0.0, description="㎡ 환산 합계")
    rows: List[TakeoffRow] = Field(default_factory=list)


class AggregateMeta(BaseModel):
    """집계 단계 결과 메타데이터"""
    query: str = ''
    matched_count: int = 0
    oracle_requested: int = Field(default=0, description="오라클에 보낸 행 수")
    oracle_returned: int = Field(default=0, description="오라클이 돌려준 유효 항목 수")
    detected_columns: Optional[DetectedColumns] = None
    notes: List[str] = Field(default_factory=list)


# =============================================================================
# 타입 별칭 (Type Aliases)
# =============================================================================

ClassifyEnvelope = Envelope[DetectedColumns, ClassifyMeta]
TakeoffResult = Envelope[AggregateData, AggregateMeta]


__all__ = [
    'Stage',
    'Envelope',
    'SIZE_FIELDS',
    'clamp_mm',
    'SizeResult',
    'PendingExtraction',
    'OracleResponseItem',
    'DetectedColumns',
    'ClassifyMeta',
    'ClassifyEnvelope',
    'TakeoffRow',
    'AggregateData',
    'AggregateMeta',
    'TakeoffResult',
]
