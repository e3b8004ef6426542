"""
규칙 기반 치수 추출기 (size_extraction/dimension_extractor)
-----------------------------------------------------
摘要/仕様 셀의 자유 텍스트에서 mm 단위 치수를 정규식으로 뽑습니다.

지원 표기
- 높이  : H=300, H-300, H300, 高さ300, 立上り300, 糸尺150, タテ200, 縦200
- 폭    : W=150, W:150, 幅150, 巾150, ヨコ150, 横150
- 길이  : L=1200, 長さ1200, L=1.2m (m 표기는 mm 로 환산)
- 겹침  : 重ね100, ラップ100, overlap 100
- 쌍    : 300×300, 300x300, 300＊300 → wide/length 모두 설정 (쌍 증거)

라벨과 숫자 사이 구분자는 - = ＝ : ： ≈ ≒ ~ 및 공백을 허용합니다.
H/W/L 라틴 라벨은 앞 글자가 다른 라틴 문자이면 라벨로 보지 않습니다 (예: "mm H" 는 허용, "PH" 는 불허).

모든 값은 반올림 후 [0, 999999] 로 제한되며, 0 이하는 버립니다 (0 = "모름" 이 아님).
"""
from __future__ import annotations

from typing import Optional, Pattern
import re

from sheet_takeoff.models.envelopes import SIZE_FIELDS, SizeResult, clamp_mm
from sheet_takeoff.services.reference.lexicon import Lexicon, get_default_lexicon

from .text_normalizer import normalize_text

_SEP = r"\s*(?:[-=＝:：≈≒~]\s*)?"
_NUM = r"(\d+(?:\.\d+)?)"


def _label_re(labels: str, flags: int = 0) -> Pattern[str]:
    return re.compile(rf"(?:{labels}){_SEP}{_NUM}", flags)


HEIGHT_RE = _label_re(r"(?<![A-Za-z])H|高さ|立ち?上り|糸尺|糸|タテ|縦", re.IGNORECASE)
WIDE_RE = _label_re(r"(?<![A-Za-z])W|幅|巾|ヨコ|横", re.IGNORECASE)
LENGTH_RE = re.compile(
    rf"(?:(?<![A-Za-z])L|長さ){_SEP}{_NUM}\s*(mm|m(?![A-Za-z0-9²]))?",
    re.IGNORECASE,
)
OVERLAP_RE = _label_re(r"重ね|ラップ|overlap", re.IGNORECASE)
PAIR_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*[×xX＊*✕]\s*(\d+(?:\.\d+)?)(?![\d.])")

_FIELD_LABELS = {
    "height_mm": HEIGHT_RE,
    "wide_mm": WIDE_RE,
    "length_mm": LENGTH_RE,
    "overlap_mm": OVERLAP_RE,
}


def _positive_mm(raw: str, scale: float = 1.0) -> Optional[int]:
    v = clamp_mm(float(raw) * scale)
    return v if v > 0 else None


def _pick(pattern: Pattern[str], text: str) -> Optional[int]:
    m = pattern.search(text)
    if not m:
        return None
    return _positive_mm(m.group(1))


def _pick_length(text: str) -> Optional[int]:
    m = LENGTH_RE.search(text)
    if not m:
        return None
    unit = (m.group(2) or "").lower()
    return _positive_mm(m.group(1), 1000.0 if unit == "m" else 1.0)


# ---------------------------------------------------------------------------
# 증거 판정 (sanitizer 에서 사용)
# ---------------------------------------------------------------------------

def has_pair_evidence(text: str) -> bool:
    """W×L 쌍 표기가 있는지"""
    return PAIR_RE.search(normalize_text(text)) is not None


def has_length_label(text: str) -> bool:
    return LENGTH_RE.search(normalize_text(text)) is not None


def has_label_evidence(text: str, field: str) -> bool:
    """해당 필드의 명시 라벨(+숫자)이 텍스트에 있는지.

    폭/길이는 쌍 표기도 증거로 인정합니다.
    """
    t = normalize_text(text)
    pattern = _FIELD_LABELS.get(field)
    if pattern is not None and pattern.search(t):
        return True
    if field in ("wide_mm", "length_mm"):
        return PAIR_RE.search(t) is not None
    return False


# ---------------------------------------------------------------------------
# 추출
# ---------------------------------------------------------------------------

def extract_dimensions(text: str) -> SizeResult:
    """텍스트 근거가 있는 필드만 채운 SizeResult"""
    t = normalize_text(text)
    out = SizeResult()
    if not t:
        return out

    out.overlap_mm = _pick(OVERLAP_RE, t)
    out.height_mm = _pick(HEIGHT_RE, t)

    pair = PAIR_RE.search(t)
    if pair:
        out.wide_mm = _positive_mm(pair.group(1))
        out.length_mm = _positive_mm(pair.group(2))

    if out.wide_mm is None:
        out.wide_mm = _pick(WIDE_RE, t)
    if out.length_mm is None:
        out.length_mm = _pick_length(t)
    return out


def fill_missing(base: SizeResult, fallback: SizeResult) -> SizeResult:
    """base 에 없는 치수 필드만 fallback 에서 채움 (base 값은 덮어쓰지 않음)"""
    merged = base.model_copy()
    for name in SIZE_FIELDS:
        if getattr(merged, name) is None and getattr(fallback, name) is not None:
            setattr(merged, name, getattr(fallback, name))
    return merged


def should_skip_row(text: str, lexicon: Optional[Lexicon] = None) -> bool:
    """소계/합계 행 또는 仕様 번호 제목 행이면 True (오라클 대상 제외)"""
    lex = lexicon or get_default_lexicon()
    t = normalize_text(text)
    if not t:
        return True
    return bool(lex.subtotal_pattern.search(t) or lex.heading_pattern.search(t))
