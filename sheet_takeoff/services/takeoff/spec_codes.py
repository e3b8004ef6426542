"""仕様 코드 후보 추출

시트의 모든 셀에서 검색어(query)로 쓸 수 있는 코드형 토큰을 모읍니다.
- 구분-숫자  : 防-1, W-3, A-10 (라틴 대문자 또는 한자 1~4자 + 숫자 1~4자)
- 영숫자 코드: OAVP-2S, XYZ-100A (라틴 대문자 2~10자 + 영숫자 1~10자)
"""
from __future__ import annotations

from typing import Iterable, List, Set
import re

from sheet_takeoff.models.grid import Grid
from sheet_takeoff.services.size_extraction.text_normalizer import normalize_text

_CJK = r"一-鿿々"

_SECTION_CODE_RE = re.compile(
    rf"(?<![A-Z0-9{_CJK}])([A-Z]{{1,4}}-\d{{1,4}}|[{_CJK}]{{1,4}}-\d{{1,4}})(?![A-Z0-9{_CJK}])"
)
_PRODUCT_CODE_RE = re.compile(r"(?<![A-Z0-9])([A-Z]{2,10}-[A-Z0-9]{1,10})(?![A-Z0-9])")
_PUNCT_RE = re.compile(r"[、,。．.・:：;；()（）［\[\]【】]")


def candidates_from_text(text: str) -> List[str]:
    """셀 하나의 코드 후보 (순서 유지, 중복 허용)"""
    s = normalize_text(text)
    if not s:
        return []
    found = [m.group(1) for m in _SECTION_CODE_RE.finditer(s)]
    found += [m.group(1) for m in _PRODUCT_CODE_RE.finditer(s)]

    out = []
    for raw in found:
        x = _PUNCT_RE.sub("", raw).strip()
        if len(x) < 3 or "-" not in x or x[0].isdigit():
            continue
        out.append(x)
    return out


def extract_spec_codes(grid: Grid | Iterable[Iterable[str]]) -> List[str]:
    """그리드 전체에서 중복 제거·정렬된 코드 후보 목록"""
    codes: Set[str] = set()
    for row in grid:
        for cell in row:
            codes.update(candidates_from_text(cell or ""))
    return sorted(codes)
