"""
내용 기반 열 판정기 (column_detection/column_classifier)
-----------------------------------------------------
헤더 문자열을 전혀 보지 않고, 열 통계(ColumnFeatures)만으로 견적서의
名称(item) / 摘要(desc) / 数量(qty) / 単位(unit) / 金額(amount) 열을 결정합니다.

판정 순서 (뒤 단계는 앞 단계가 차지한 열을 제외)
1) unit   : 단위 토큰 비율 최대 열 (>= 0.20 일 때만 채택)
2) qty    : 숫자 비율 + unit 근접 보너스 - 금액다움 패널티
3) amount : 단가 열 추정 후, 그보다 오른쪽에서 "최대 자릿수"가 큰 열. 금액이 비어 있으면 None
4) desc   : 텍스트 비율 + 치수/사양 패턴 적중률
5) item   : 긴 텍스트 + 왼쪽 위치 (desc 보다 왼쪽 우대)

임계치를 넘지 못한 역할은 폴백 열(설정값)을 사용합니다.
판정 근거는 DetectionResult.notes 로 함께 반환되며 DEBUG 로그로도 남깁니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import logging
import math

from sheet_takeoff.models.envelopes import ClassifyEnvelope, ClassifyMeta, DetectedColumns
from sheet_takeoff.models.grid import Grid
from sheet_takeoff.services.reference.lexicon import Lexicon, get_default_lexicon

from .feature_extractor import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_MAX_SCAN_ROWS,
    ColumnFeatures,
    FeatureSet,
    extract_features,
)

logger = logging.getLogger(__name__)


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def proximity_bonus(col: int, target: int, max_distance: int) -> float:
    """target 열에 가까울수록 1에 가까운 보너스 (거리 초과 시 0)"""
    return max(0.0, (max_distance - abs(col - target)) / max_distance)


@dataclass
class ColumnDetectorSettings:
    """ColumnClassifier 설정값.

    문서 계열(견적서 양식)별로 조정 가능한 임계치와 폴백 열을 보관합니다.
    폴백 열은 0-based 이며, 해당 역할의 채택 임계치를 넘지 못했을 때만 사용됩니다.
    """

    # 샘플링
    max_scan_rows: int = DEFAULT_MAX_SCAN_ROWS
    max_samples_per_column: int = DEFAULT_MAX_SAMPLES

    # 채택 임계치
    unit_min_ratio: float = 0.20
    qty_min_numeric: float = 0.25
    unit_price_min_numeric: float = 0.25
    amount_min_numeric: float = 0.10
    desc_min_text: float = 0.35
    item_min_text: float = 0.35
    item_tie_margin: float = 0.12

    # 금액 최소 규모 (최대 자릿수 또는 최대값 중 하나는 만족해야 함)
    amount_min_digits: int = 4
    amount_min_abs: float = 1000.0

    # 폴백 열 (0-based)
    fallback_item: int = 3
    fallback_desc: int = 7
    fallback_qty: int = 11
    fallback_unit: int = 13

    lexicon: Lexicon = field(default_factory=get_default_lexicon)


@dataclass
class DetectionResult:
    """열 판정 결과 (0-based) + 진단 정보"""

    item: int
    desc: int
    qty: int
    unit: int
    amount: Optional[int] = None
    unit_price: Optional[int] = None
    scanned_rows: int = 0
    scanned_cols: int = 0
    notes: List[str] = field(default_factory=list)

    def to_detected_columns(self) -> DetectedColumns:
        """외부 계약용 1-based 열 번호로 변환 (size 열은 desc 와 동일)"""
        return DetectedColumns(
            item=self.item + 1,
            desc=self.desc + 1,
            qty=self.qty + 1,
            unit=self.unit + 1,
            amount=self.amount + 1 if self.amount is not None else None,
            size=self.desc + 1,
        )

    def to_envelope(self) -> ClassifyEnvelope:
        return ClassifyEnvelope(
            stage='classify',
            data=self.to_detected_columns(),
            meta=ClassifyMeta(
                scanned_rows=self.scanned_rows,
                scanned_cols=self.scanned_cols,
                notes=list(self.notes),
            ),
        )


class ColumnClassifier:
    """열 통계 기반 역할 판정기"""

    def __init__(self, settings: Optional[ColumnDetectorSettings] = None):
        self.settings = settings or ColumnDetectorSettings()

    # ------------------------------------------------------------------
    # 공개 API
    # ------------------------------------------------------------------
    def detect(self, grid: Grid) -> DetectionResult:
        """그리드에서 바로 판정 (특징 추출 포함)"""
        s = self.settings
        features = extract_features(
            grid,
            lexicon=s.lexicon,
            max_scan_rows=s.max_scan_rows,
            max_samples=s.max_samples_per_column,
        )
        return self.classify(features)

    def classify(self, fs: FeatureSet) -> DetectionResult:
        s = self.settings
        notes: List[str] = []

        def note(msg: str) -> None:
            notes.append(msg)
            logger.debug("column detection: %s", msg)

        feats = fs.ordered()
        if not feats:
            note("no features -> fallback")
            return DetectionResult(
                item=s.fallback_item,
                desc=s.fallback_desc,
                qty=s.fallback_qty,
                unit=s.fallback_unit,
                amount=None,
                scanned_rows=fs.scanned_rows,
                scanned_cols=fs.max_cols,
                notes=notes,
            )

        unit0 = self._pick_unit(feats, note)
        # 미확정이어도 폴백 열은 단위 몫으로 비워 둔다
        unit_col = unit0 if unit0 >= 0 else s.fallback_unit
        qty0 = self._pick_qty(feats, unit0, unit_col, note)
        unit_price0 = self._pick_unit_price(feats, unit0, qty0, note)
        amount0 = self._pick_amount(fs, feats, unit0, unit_col, qty0, unit_price0, note)
        desc0 = self._pick_desc(feats, unit_col, qty0, amount0, note)
        item0 = self._pick_item(fs, feats, unit_col, qty0, amount0, desc0, note)
        desc0 = self._resolve_conflict(feats, item0, desc0, unit_col, qty0, amount0, note)

        return DetectionResult(
            item=item0,
            desc=desc0,
            qty=qty0,
            unit=unit_col,
            amount=amount0,
            unit_price=unit_price0 if unit_price0 >= 0 else None,
            scanned_rows=fs.scanned_rows,
            scanned_cols=fs.max_cols,
            notes=notes,
        )

    # ------------------------------------------------------------------
    # 역할별 판정 (unit 미확정은 -1 로 전달)
    # ------------------------------------------------------------------
    def _pick_unit(self, feats: List[ColumnFeatures], note) -> int:
        best = max(feats, key=lambda f: f.unit_ratio)
        if best.unit_ratio >= self.settings.unit_min_ratio:
            note(f"unit=col{best.col + 1} unitRatio={best.unit_ratio:.2f}")
            return best.col
        note("unit not confident")
        return -1

    def _pick_qty(self, feats: List[ColumnFeatures], unit0: int, unit_col: int, note) -> int:
        best_score = -math.inf
        best: Optional[ColumnFeatures] = None
        for f in feats:
            if f.col == unit_col:
                continue
            near = proximity_bonus(f.col, unit0, 3) if unit0 >= 0 else 0.0
            mean_penalty = 0.8 if f.mean_abs_number >= 5000 else 0.0
            score = (
                2.2 * f.numeric_ratio
                + 0.8 * near
                - 1.2 * f.currency_ratio
                - 0.6 * f.comma_ratio
                - 1.2 * f.big_number_ratio
                - mean_penalty
            )
            if score > best_score:
                best_score = score
                best = f

        if best is None or best.numeric_ratio < self.settings.qty_min_numeric:
            note("qty not confident -> fallback")
            qty0 = self.settings.fallback_qty
            if qty0 == unit_col:
                qty0 = qty0 - 1 if qty0 > 0 else qty0 + 1
                note(f"qty==unit conflict -> qty=col{qty0 + 1}")
            return qty0
        note(f"qty=col{best.col + 1} score={best_score:.2f} numericRatio={best.numeric_ratio:.2f}")
        return best.col

    def _pick_unit_price(self, feats: List[ColumnFeatures], unit0: int, qty0: int, note) -> int:
        """단가 열 추정 (금액 열의 좌측 한계를 정하기 위한 보조 판정)"""
        if unit0 < 0:
            return -1
        best_score = -math.inf
        unit_price0 = -1
        for f in feats:
            if f.col in (unit0, qty0) or f.col <= unit0:
                continue
            if f.numeric_ratio < self.settings.unit_price_min_numeric:
                continue
            if f.median_digits < 2 or f.median_digits > 6:
                continue
            score = (
                1.2 * f.numeric_ratio
                + 1.0 * proximity_bonus(f.col, unit0, 4)
                + 0.4 * (1 - _clamp((f.median_digits - 4) / 4, 0, 1))
            )
            if score > best_score:
                best_score = score
                unit_price0 = f.col
        if unit_price0 >= 0:
            note(f"unitPrice~col{unit_price0 + 1}")
        return unit_price0

    def _amount_score(self, f: ColumnFeatures, max_cols: int, unit0: int, qty0: int) -> float:
        if f.non_zero_count == 0:
            return -math.inf
        score = (
            6.2 * _clamp(f.max_digits_non_zero / 10, 0, 1)
            + 3.0 * _clamp(math.log10(f.max_abs_non_zero + 1) / 10, 0, 1)
            + 0.8 * _clamp(f.median_digits / 10, 0, 1)
            + 0.6 * _clamp(math.log10(f.median_abs_number + 1) / 10, 0, 1)
            + 0.6 * f.filled_ratio
            + 0.4 * f.non_zero_ratio
            + 0.8 * _clamp(f.col / max(1, max_cols - 1), 0, 1)
        )
        if qty0 >= 0 and abs(f.col - qty0) <= 1:
            score -= 0.5
        if unit0 >= 0 and abs(f.col - unit0) <= 1:
            score -= 0.5
        # 단가처럼 보이는 자릿수
        if 2 <= f.median_digits <= 6 and f.max_digits_non_zero <= 6:
            score -= 0.7
        return score

    def _pick_amount(
        self,
        fs: FeatureSet,
        feats: List[ColumnFeatures],
        unit0: int,
        unit_col: int,
        qty0: int,
        unit_price0: int,
        note,
    ) -> Optional[int]:
        s = self.settings
        right_min = max(qty0, unit0, unit_price0) + 1
        candidates = [
            f
            for f in feats
            if f.col not in (unit_col, qty0)
            and f.col >= right_min
            and f.numeric_ratio >= s.amount_min_numeric
        ]
        if not candidates:
            note(f"amount not found on right side (rightMin=col{right_min + 1}) -> null")
            return None

        best_score = -math.inf
        best: Optional[ColumnFeatures] = None
        for f in candidates:
            score = self._amount_score(f, fs.max_cols, unit0, qty0)
            if best is None or score > best_score:
                best_score = score
                best = f

        if best.non_zero_count == 0:
            note(
                f"amount has no non-zero numbers -> null "
                f"(col{best.col + 1} filled={best.filled_ratio:.2f})"
            )
            return None
        if best.max_digits_non_zero < s.amount_min_digits and best.max_abs_non_zero < s.amount_min_abs:
            note(
                f"amount scale too small -> null (col{best.col + 1} "
                f"maxDigits={best.max_digits_non_zero} maxAbs={best.max_abs_non_zero:g})"
            )
            return None
        note(
            f"amount=col{best.col + 1} score={best_score:.2f} nonZero={best.non_zero_count} "
            f"maxDigits={best.max_digits_non_zero} maxAbs={round(best.max_abs_non_zero)} "
            f"medDigits={best.median_digits:.1f}"
        )
        return best.col

    def _pick_desc(
        self,
        feats: List[ColumnFeatures],
        unit0: int,
        qty0: int,
        amount0: Optional[int],
        note,
    ) -> int:
        best_score = -math.inf
        best: Optional[ColumnFeatures] = None
        for f in feats:
            if f.col in (unit0, qty0, amount0):
                continue
            score = (
                1.4 * f.text_ratio
                + 0.8 * _clamp(f.avg_len / 24, 0, 1)
                + 2.0 * f.size_hit_ratio
                + 1.6 * f.spec_hit_ratio
                - 1.0 * f.numeric_ratio
            )
            if score > best_score:
                best_score = score
                best = f

        if best is None or best.text_ratio < self.settings.desc_min_text:
            note("desc not confident -> fallback")
            return self.settings.fallback_desc
        note(f"desc=col{best.col + 1} score={best_score:.2f} sizeHit={best.size_hit_ratio:.2f}")
        return best.col

    def _pick_item(
        self,
        fs: FeatureSet,
        feats: List[ColumnFeatures],
        unit0: int,
        qty0: int,
        amount0: Optional[int],
        desc0: int,
        note,
    ) -> int:
        s = self.settings
        span = max(1, fs.max_cols - 1)
        scored = []
        for f in feats:
            if f.col in (desc0, unit0, qty0, amount0):
                continue
            left_of_desc = f.col < desc0
            leftness = 1 - f.col / span
            score = (
                1.4 * f.text_ratio
                + 1.8 * _clamp(f.long_text_ratio / 0.35, 0, 1)
                + 1.2 * _clamp(f.avg_len / 28, 0, 1)
                + 0.9 * leftness
                + (0.9 if left_of_desc else 0.0)
                + 0.9 * f.work_word_ratio
                - 1.2 * f.numeric_ratio
                - 1.2 * f.spec_hit_ratio
                - 1.4 * f.size_hit_ratio
                - (0.0 if left_of_desc else 1.2)
            )
            scored.append((score, f))

        if not scored:
            note("item not confident -> fallback")
            return s.fallback_item

        best_score = max(score for score, _ in scored)
        # 최고점과 tie_margin 이내면 가장 왼쪽 열
        _, best = min(
            ((score, f) for score, f in scored if score >= best_score - s.item_tie_margin),
            key=lambda pair: pair[1].col,
        )
        if best.text_ratio < s.item_min_text:
            note("item not confident -> fallback")
            return s.fallback_item
        note(
            f"item=col{best.col + 1} score={best_score:.2f} "
            f"longText={best.long_text_ratio:.2f} leftness={1 - best.col / span:.2f}"
        )
        return best.col

    def _resolve_conflict(
        self,
        feats: List[ColumnFeatures],
        item0: int,
        desc0: int,
        unit0: int,
        qty0: int,
        amount0: Optional[int],
        note,
    ) -> int:
        """item == desc 이면 desc 만 차점 열로 옮김 (item 은 고정)"""
        if item0 != desc0:
            return desc0
        note("item==desc conflict -> adjust desc")
        best_score = -math.inf
        alt = desc0
        for f in feats:
            if f.col in (item0, unit0, qty0, amount0):
                continue
            score = (
                1.2 * f.text_ratio
                + 1.8 * f.size_hit_ratio
                + 1.4 * f.spec_hit_ratio
                - 1.0 * f.numeric_ratio
            )
            if score > best_score:
                best_score = score
                alt = f.col
        return alt if alt != item0 else desc0


def detect_columns(grid: Grid, settings: Optional[ColumnDetectorSettings] = None) -> DetectionResult:
    """편의 함수: 기본 설정으로 그리드의 열 역할 판정"""
    return ColumnClassifier(settings).detect(grid)
