"""
열 특징 추출기 (column_detection/feature_extractor)
-----------------------------------------------------
헤더 없는 견적서 그리드를 열 단위 통계 요약(ColumnFeatures)으로 변환합니다.

스캔 대상 행
- 비어 있지 않은 셀이 2개 이상인 행만 사용 (1셀 행은 제목/구분 행이라 통계를 왜곡)
- 위에서부터 최대 140행
- 조건을 만족하는 행이 하나도 없으면 비어 있지 않은 행 앞쪽 140개로 대체

열 샘플
- 열마다 비어 있지 않은 값(trim 후) 최대 200개

숫자 판정
- 천 단위 콤마와 앞뒤 공백을 제거한 뒤 ^[-+]?\\d*\\.?\\d+$ 에 일치할 때만 숫자
- %, 단위 접미사 등이 붙으면 숫자가 아님
"""
from __future__ import annotations

from dataclasses import dataclass, field
from statistics import median
from typing import Dict, List, Optional, Sequence
import logging
import math
import re

from sheet_takeoff.models.grid import Grid, non_blank_count
from sheet_takeoff.services.reference.lexicon import Lexicon, get_default_lexicon

logger = logging.getLogger(__name__)

_PLAIN_NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+")
_WS_RE = re.compile(r"\s+")

DEFAULT_MAX_SCAN_ROWS = 140
DEFAULT_MAX_SAMPLES = 200
BIG_NUMBER = 10_000
LONG_TEXT_LEN = 10


def parse_plain_number(text: str) -> Optional[float]:
    """콤마 제거 후 순수 십진수이면 float, 아니면 None"""
    t = (text or "").replace(",", "").strip()
    if not t or not _PLAIN_NUMBER_RE.fullmatch(t):
        return None
    v = float(t)
    return v if math.isfinite(v) else None


def digit_length(value: float) -> int:
    """정수부 자릿수 (|v| < 1 이면 1)"""
    a = abs(value)
    if a < 1:
        return 1
    return int(math.floor(math.log10(a))) + 1


@dataclass
class ColumnFeatures:
    """한 열의 통계 요약

    *_ratio 는 샘플 수 기준, fill 통계(filled/non_zero)는 스캔 행 수 기준입니다.
    """

    col: int
    count: int

    # 숫자성
    numeric_ratio: float = 0.0
    mean_abs_number: float = 0.0
    median_abs_number: float = 0.0
    median_digits: float = 0.0
    big_number_ratio: float = 0.0

    # 단위/텍스트성
    unit_ratio: float = 0.0
    text_ratio: float = 0.0
    avg_len: float = 0.0
    long_text_ratio: float = 0.0

    # 패턴 적중률
    size_hit_ratio: float = 0.0
    spec_hit_ratio: float = 0.0
    currency_ratio: float = 0.0
    comma_ratio: float = 0.0
    work_word_ratio: float = 0.0

    # 채움 통계 (금액 열 판정용)
    filled_count: int = 0
    non_zero_count: int = 0
    filled_ratio: float = 0.0
    non_zero_ratio: float = 0.0
    max_abs_non_zero: float = 0.0
    max_digits_non_zero: int = 0


@dataclass
class FeatureSet:
    """추출 결과 묶음"""

    features: Dict[int, ColumnFeatures] = field(default_factory=dict)
    scanned_rows: int = 0
    max_cols: int = 0

    def get(self, col: int) -> Optional[ColumnFeatures]:
        return self.features.get(col)

    def ordered(self) -> List[ColumnFeatures]:
        """열 인덱스 오름차순"""
        return [self.features[c] for c in sorted(self.features)]


def select_scan_rows(grid: Grid, max_rows: int = DEFAULT_MAX_SCAN_ROWS) -> List[Sequence[str]]:
    """통계에 사용할 내용 행 선택"""
    non_empty = [row for row in grid if non_blank_count(row) > 0]
    content = []
    for row in non_empty:
        if non_blank_count(row) < 2:
            continue
        content.append(row)
        if len(content) >= max_rows:
            break
    if content:
        return content
    return non_empty[:max_rows]


def _fill_stats(feat: ColumnFeatures, scan: List[Sequence[str]]) -> None:
    filled = 0
    non_zero = 0
    max_abs = 0.0
    max_digits = 0
    for row in scan:
        raw = row[feat.col].strip() if feat.col < len(row) else ""
        if not raw:
            continue
        n = parse_plain_number(raw)
        if n is None:
            # 비숫자는 빈 셀과 동일 취급
            continue
        filled += 1
        if n != 0:
            non_zero += 1
            max_abs = max(max_abs, abs(n))
            max_digits = max(max_digits, digit_length(n))

    denom = max(1, len(scan))
    feat.filled_count = filled
    feat.non_zero_count = non_zero
    feat.filled_ratio = filled / denom
    feat.non_zero_ratio = non_zero / denom
    feat.max_abs_non_zero = max_abs
    feat.max_digits_non_zero = max_digits


def _column_features(
    col: int, samples: List[str], lexicon: Lexicon
) -> ColumnFeatures:
    count = len(samples)
    numeric = 0
    sum_abs = 0.0
    big = 0
    digits: List[int] = []
    abs_values: List[float] = []
    unit = long_text = size_hit = spec_hit = currency = comma = work = 0
    len_sum = 0

    for x in samples:
        len_sum += len(x)
        if "," in x:
            comma += 1
        if lexicon.currency_pattern.search(x):
            currency += 1

        n = parse_plain_number(x)
        if n is not None:
            numeric += 1
            a = abs(n)
            sum_abs += a
            abs_values.append(a)
            digits.append(digit_length(n))
            if a >= BIG_NUMBER:
                big += 1
        elif len(x.strip()) >= LONG_TEXT_LEN:
            long_text += 1

        if _WS_RE.sub("", x) in lexicon.unit_tokens:
            unit += 1
        if lexicon.size_pattern.search(x):
            size_hit += 1
        if lexicon.spec_pattern.search(x):
            spec_hit += 1
        if lexicon.work_name_pattern.search(x):
            work += 1

    numeric_ratio = numeric / count
    return ColumnFeatures(
        col=col,
        count=count,
        numeric_ratio=numeric_ratio,
        mean_abs_number=sum_abs / numeric if numeric else 0.0,
        median_abs_number=median(abs_values) if abs_values else 0.0,
        median_digits=median(digits) if digits else 0.0,
        big_number_ratio=big / numeric if numeric else 0.0,
        unit_ratio=unit / count,
        text_ratio=1.0 - numeric_ratio,
        avg_len=len_sum / count,
        long_text_ratio=long_text / count,
        size_hit_ratio=size_hit / count,
        spec_hit_ratio=spec_hit / count,
        currency_ratio=currency / count,
        comma_ratio=comma / count,
        work_word_ratio=work / count,
    )


def extract_features(
    grid: Grid,
    lexicon: Optional[Lexicon] = None,
    max_scan_rows: int = DEFAULT_MAX_SCAN_ROWS,
    max_samples: int = DEFAULT_MAX_SAMPLES,
) -> FeatureSet:
    """그리드 → 열별 ColumnFeatures (샘플이 1개 이상인 열만)"""
    lex = lexicon or get_default_lexicon()
    scan = select_scan_rows(grid, max_scan_rows)
    max_cols = max((len(r) for r in scan), default=0)

    samples: List[List[str]] = [[] for _ in range(max_cols)]
    for row in scan:
        for c in range(min(len(row), max_cols)):
            v = row[c].strip()
            if v and len(samples[c]) < max_samples:
                samples[c].append(v)

    features: Dict[int, ColumnFeatures] = {}
    for c, values in enumerate(samples):
        if not values:
            continue
        feat = _column_features(c, values, lex)
        _fill_stats(feat, scan)
        features[c] = feat

    logger.debug(
        "feature extraction: scanned_rows=%d max_cols=%d sampled_cols=%d",
        len(scan),
        max_cols,
        len(features),
    )
    return FeatureSet(features=features, scanned_rows=len(scan), max_cols=max_cols)
