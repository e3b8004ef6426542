"""
단위 정규화 유틸리티 모듈
-----------------------------------------------------
견적서 単位 셀의 표기 흔들림을 canonical 단위로 통일합니다.

주요 기능:
1. 공백 전부 제거 (엑셀 셀 안 줄바꿈 "ヶ\\n所" 대응)
2. 전각/반각/기호 변형 → m, ㎡, 箇所, 段, kg, L
3. 사전에 없는 표기는 공백만 제거한 문자열 그대로 통과

NFKC 를 먼저 적용하면 ㎡ 가 "m2" 로 바뀌어 버리므로, 사전 조회를 원문 기준으로 먼저 수행합니다.

사용처:
- merge_policy.py: 오라클 대상 행(단위 m) 선별
- aggregator.py: 단위별 합계 키, ㎡ 환산 규칙 분기
"""
import re
from typing import Optional

from sheet_takeoff.services.reference.lexicon import Lexicon, get_default_lexicon

_WS_RE = re.compile(r"\s+")


def normalize_unit(unit: Optional[str], lexicon: Optional[Lexicon] = None) -> str:
    """
    단위 문자열 정규화

    Args:
        unit: 원본 단위 문자열 (None 허용)
        lexicon: 별칭 사전 (None 이면 기본 사전)

    Returns:
        canonical 단위 또는 공백 제거된 원문 (빈 입력은 "")
    """
    if not unit:
        return ""
    s = _WS_RE.sub("", str(unit))
    if not s:
        return ""
    lex = lexicon or get_default_lexicon()
    return lex.alias_index.get(s, s)
