"""
치수 보정기 (size_extraction/sanitizer)
-----------------------------------------------------
추출 결과(규칙/오라클 공통)에서 행의 단위·수량과 모순되는 값을 제거합니다.
오라클 결과도 예외 없이 이 단계를 거칩니다.

1) 근거 없는 길이 제거
   - 텍스트에 W×L 쌍 표기도, 길이 라벨도 없는데 wide == length 이면 length 제거
   - "W=300" 한 축을 두 축으로 복제한 전형적인 오류 패턴
2) 수량 반향 제거 (단위가 m 인 행만)
   - qty_mm = 수량 × 1000, tol = max(30, |qty_mm| × 0.02)
   - 상한 초과(높이 5000, 폭/길이 50000)는 무조건 제거
   - 해당 필드의 라벨 근거가 없고 qty_mm 과 tol 이내이면 제거
     (예: 수량 58.8m 가 H=58800mm 로 잘못 읽힌 경우)

두 단계 모두 값을 제거만 하므로 여러 번 적용해도 결과가 같습니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from sheet_takeoff.models.envelopes import SizeResult
from sheet_takeoff.services.reference.lexicon import UNIT_M

from .dimension_extractor import has_label_evidence, has_length_label, has_pair_evidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizerSettings:
    """보정 임계치"""

    max_height_mm: int = 5_000
    max_span_mm: int = 50_000
    echo_min_tolerance_mm: float = 30.0
    echo_relative_tolerance: float = 0.02

    def ceilings(self) -> Dict[str, int]:
        return {
            "height_mm": self.max_height_mm,
            "wide_mm": self.max_span_mm,
            "length_mm": self.max_span_mm,
        }


class SizeSanitizer:
    """SizeResult 보정기"""

    def __init__(self, settings: Optional[SanitizerSettings] = None):
        self.settings = settings or SanitizerSettings()

    def sanitize(
        self,
        size: SizeResult,
        text: str,
        unit: str,
        qty: Optional[float],
    ) -> SizeResult:
        out = size.model_copy()
        # 겹침 0 은 "미기재"와 구분되지 않음
        if out.overlap_mm is not None and out.overlap_mm <= 0:
            out.overlap_mm = None
        self._drop_unsupported_length(out, text)
        if unit == UNIT_M:
            self._drop_quantity_echo(out, text, qty)
        return out

    def _drop_unsupported_length(self, size: SizeResult, text: str) -> None:
        if size.wide_mm is None or size.length_mm is None:
            return
        if size.wide_mm != size.length_mm:
            return
        if has_pair_evidence(text) or has_length_label(text):
            return
        logger.debug("drop length_mm=%s (duplicated width, no pair/length label)", size.length_mm)
        size.length_mm = None

    def _drop_quantity_echo(self, size: SizeResult, text: str, qty: Optional[float]) -> None:
        s = self.settings
        qty_mm = (qty or 0.0) * 1000.0
        tol = max(s.echo_min_tolerance_mm, abs(qty_mm) * s.echo_relative_tolerance)
        for name, ceiling in s.ceilings().items():
            value = getattr(size, name)
            if value is None:
                continue
            if value > ceiling:
                logger.debug("drop %s=%s (over ceiling %s)", name, value, ceiling)
                setattr(size, name, None)
                continue
            if abs(value - qty_mm) <= tol and not has_label_evidence(text, name):
                logger.debug("drop %s=%s (echo of qty=%s)", name, value, qty)
                setattr(size, name, None)


_default_sanitizer = SizeSanitizer()


def sanitize_size(size: SizeResult, text: str, unit: str, qty: Optional[float]) -> SizeResult:
    """기본 설정 보정기로 보정"""
    return _default_sanitizer.sanitize(size, text, unit, qty)
