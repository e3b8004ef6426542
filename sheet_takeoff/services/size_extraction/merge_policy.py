"""
오라클 병합 정책 (size_extraction/merge_policy)
-----------------------------------------------------
모든 행에 규칙 기반 추출을 수행하고, 단위 m 행만 모아 오라클을 1회 호출한 뒤
결과를 행 id 기준으로 병합합니다.

병합 순서 (행마다)
1) 오라클이 준 필드만 사용 (0 을 만들어 넣지 않음)
2) 비어 있는 필드는 규칙 기반 추출값으로 채움
3) SizeSanitizer 로 보정 (오라클 값도 예외 없음)
4) suggested_input 재계산 (오라클 값은 항상 무시)
   - m 행   : (H + 重ね) / 1000, H 가 없으면 W / 1000
   - 그 외  : W × L / 1,000,000 (㎡/단위)
5) calc_m2 로컬 계산 (오라클 calcM2 는 항상 무시)

오라클 호출이 실패하거나 빈 결과를 돌려주면 규칙 기반 결과만으로 진행합니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from sheet_takeoff.models.envelopes import PendingExtraction, SizeResult
from sheet_takeoff.services.aggregation.aggregator import compute_calc_m2
from sheet_takeoff.services.reference.lexicon import UNIT_M, Lexicon, get_default_lexicon
from sheet_takeoff.settings import settings

from .dimension_extractor import extract_dimensions, fill_missing, should_skip_row
from .oracle import NullSizeOracle, SizeOracle
from .sanitizer import SizeSanitizer
from .text_normalizer import normalize_text

logger = logging.getLogger(__name__)


@dataclass
class SizeRow:
    """병합 대상 한 행 (id 는 작업 버퍼 내 행 번호)"""

    id: int
    text: str
    unit: str
    qty: float
    override: Optional[float] = None


@dataclass
class EnrichmentResult:
    sizes: Dict[int, SizeResult] = field(default_factory=dict)
    requested: int = 0
    returned: int = 0


def compute_suggested_input(unit: str, size: SizeResult) -> Optional[float]:
    """보정된 치수로부터 단위별 환산값 계산"""
    if unit == UNIT_M:
        if size.height_mm is not None:
            return (size.height_mm + (size.overlap_mm or 0)) / 1000
        if size.wide_mm is not None:
            return size.wide_mm / 1000
        return None
    if size.wide_mm is not None and size.length_mm is not None:
        return size.wide_mm * size.length_mm / 1_000_000
    return None


class OracleMergePolicy:
    """규칙 기반 추출 + 오라클 보강 + 보정을 묶는 정책"""

    def __init__(
        self,
        oracle: Optional[SizeOracle] = None,
        sanitizer: Optional[SizeSanitizer] = None,
        max_batch: Optional[int] = None,
        enabled: Optional[bool] = None,
        lexicon: Optional[Lexicon] = None,
    ):
        self.oracle = oracle or NullSizeOracle()
        self.sanitizer = sanitizer or SizeSanitizer()
        self.max_batch = settings.size_oracle_max_batch if max_batch is None else max_batch
        self.enabled = settings.size_oracle_enabled if enabled is None else enabled
        self.lexicon = lexicon or get_default_lexicon()

    def is_eligible(self, row: SizeRow) -> bool:
        """오라클 요청 대상 여부"""
        if row.unit != UNIT_M:
            return False
        if not normalize_text(row.text):
            return False
        return not should_skip_row(row.text, self.lexicon)

    def build_batch(self, rows: Sequence[SizeRow]) -> List[PendingExtraction]:
        if not self.enabled or self.max_batch <= 0:
            return []
        batch = [
            PendingExtraction(id=r.id, text=normalize_text(r.text), unit=r.unit, qty=r.qty)
            for r in rows
            if self.is_eligible(r)
        ]
        if len(batch) > self.max_batch:
            logger.info("size oracle batch capped: %d -> %d rows", len(batch), self.max_batch)
            batch = batch[: self.max_batch]
        return batch

    def _call_oracle(self, batch: List[PendingExtraction]) -> Dict[int, SizeResult]:
        if not batch:
            return {}
        try:
            result = self.oracle.extract_sizes(batch)
        except Exception as e:
            logger.warning("size oracle failed, continuing rule-based only: %s", e)
            return {}
        requested = {p.id for p in batch}
        return {k: v for k, v in (result or {}).items() if k in requested}

    def finalize(self, row: SizeRow, size: SizeResult) -> SizeResult:
        """보정 후 suggested_input / calc_m2 재계산"""
        out = self.sanitizer.sanitize(size, row.text, row.unit, row.qty)
        out.suggested_input = compute_suggested_input(row.unit, out)
        out.calc_m2 = compute_calc_m2(
            row.unit, row.qty, out, normalize_text(row.text), row.override, self.lexicon
        )
        return out

    def enrich(self, rows: Sequence[SizeRow]) -> EnrichmentResult:
        batch = self.build_batch(rows)
        oracle_sizes = self._call_oracle(batch)

        sizes: Dict[int, SizeResult] = {}
        for row in rows:
            extracted = extract_dimensions(row.text)
            if row.id in oracle_sizes:
                merged = fill_missing(oracle_sizes[row.id], extracted)
            else:
                merged = extracted
            sizes[row.id] = self.finalize(row, merged)

        logger.debug(
            "size enrichment: rows=%d requested=%d returned=%d",
            len(rows),
            len(batch),
            len(oracle_sizes),
        )
        return EnrichmentResult(sizes=sizes, requested=len(batch), returned=len(oracle_sizes))
