"""
견적서 어휘 사전 (reference/lexicon)
-----------------------------------------------------
- 열 판정(단위 토큰 비율, 치수/사양/금액/공종명 패턴)과 단위 정규화에서 사용하는
  고정 어휘 테이블을 한 곳에 모아 둡니다.
- 테이블은 시작 시 Lexicon 객체로 한 번 구성되며, 다른 문서 계열을 다룰 때는
  build_lexicon()에 교체할 테이블을 넘겨 새 Lexicon을 만들어 주입합니다.

주요 제공 함수
- get_default_lexicon(): 기본 Lexicon 반환. 최초 1회 빌드 후 메모리 캐시.
- build_lexicon(**overrides): 일부 테이블만 바꾼 Lexicon 생성.

정규화 단위(canonical)
- "m"   : 길이(미터)
- "㎡"  : 면적(제곱미터)
- "箇所": 개소
- "段"  : 계단 단수
- 그 외 : 사전에 없는 표기는 공백만 제거하여 그대로 통과
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Dict, FrozenSet, Mapping, Pattern, Tuple
import re

UNIT_M = "m"
UNIT_M2 = "㎡"
UNIT_PLACE = "箇所"
UNIT_STEP = "段"

# 열 판정용 단위 기호 집합 (셀 내부 공백 제거 후 비교)
DEFAULT_UNIT_TOKENS: FrozenSet[str] = frozenset(
    {
        "㎡",
        "m²",
        "m2",
        "m^2",
        "平米",
        "ｍ",
        "m",
        "メートル",
        "ヶ所",
        "ケ所",
        "個所",
        "箇所",
        "式",
        "段",
        "本",
        "枚",
        "台",
        "袋",
        "缶",
        "kg",
        "ＫＧ",
        "L",
        "ℓ",
    }
)

# canonical 단위 -> 표기 변형
DEFAULT_UNIT_ALIASES: Dict[str, Tuple[str, ...]] = {
    UNIT_M: ("m", "ｍ", "M", "Ｍ", "メートル"),
    UNIT_M2: ("㎡", "m2", "m²", "m^2", "平米", "ｍ2", "ｍ２", "m２", "M2", "Ｍ２"),
    UNIT_PLACE: ("箇所", "ヶ所", "ケ所", "個所", "カ所", "ヵ所", "か所"),
    UNIT_STEP: ("段",),
    "kg": ("kg", "KG", "Kg", "ｋｇ", "ＫＧ"),
    "L": ("L", "l", "ℓ", "Ｌ"),
}

# 摘要(사양/치수) 열에 자주 나오는 치수 기호/단위
DEFAULT_SIZE_PATTERN = (
    r"(H|W|L)\s*[=＝]?\s*\d+|立上り|巾|幅|長さ|重ね|糸尺|≒|×|mm|㎜|cm|m2|㎡|ｍ|m"
)

# 사양/자재/품번 키워드 (방수·도장·자재 코드)
DEFAULT_SPEC_PATTERN = (
    r"OAVP-|VS-|VT-|UP-\d|仕様|規格|型番|品番|メーカー|材料|シート|プライマー"
    r"|ウレタン|シーリング|モルタル|塗装|下地|防水"
)

# 금액 기호
DEFAULT_CURRENCY_PATTERN = r"(円|¥|￥)"

# 공종명(名称) 키워드
DEFAULT_WORK_NAME_PATTERN = (
    r"工事|防水|塗装|シーリング|下地|撤去|清掃|養生|補修|改修|施工|張替|取付|処分|運搬|諸経費"
)

# 소계/합계 행, 사양 번호 제목 행 (오라클 대상에서 제외)
DEFAULT_SUBTOTAL_PATTERN = r"(小計|合計|総計|計\b|合\s*計)"
DEFAULT_HEADING_PATTERN = r"^防水仕様[-‐ー−]\d+"

# 段(계단) 행에서 ㎡ 환산을 2배로 하는 키워드 (踏面 = 디딤면)
DEFAULT_TREAD_KEYWORDS: Tuple[str, ...] = ("踏面",)


@dataclass(frozen=True)
class Lexicon:
    """주입 가능한 어휘 테이블 묶음"""

    unit_tokens: FrozenSet[str] = DEFAULT_UNIT_TOKENS
    unit_aliases: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_UNIT_ALIASES)
    )
    size_pattern: Pattern[str] = re.compile(DEFAULT_SIZE_PATTERN, re.IGNORECASE)
    spec_pattern: Pattern[str] = re.compile(DEFAULT_SPEC_PATTERN, re.IGNORECASE)
    currency_pattern: Pattern[str] = re.compile(DEFAULT_CURRENCY_PATTERN)
    work_name_pattern: Pattern[str] = re.compile(DEFAULT_WORK_NAME_PATTERN, re.IGNORECASE)
    subtotal_pattern: Pattern[str] = re.compile(DEFAULT_SUBTOTAL_PATTERN)
    heading_pattern: Pattern[str] = re.compile(DEFAULT_HEADING_PATTERN)
    tread_keywords: Tuple[str, ...] = DEFAULT_TREAD_KEYWORDS

    # 역방향 인덱스 (표기 변형 -> canonical). __post_init__에서 구성
    alias_index: Mapping[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        index: Dict[str, str] = {}
        for canonical, variants in self.unit_aliases.items():
            index[canonical] = canonical
            for v in variants:
                index[re.sub(r"\s+", "", v)] = canonical
        object.__setattr__(self, "alias_index", index)

    def is_unit_token(self, text: str) -> bool:
        return re.sub(r"\s+", "", text) in self.unit_tokens


def build_lexicon(**overrides) -> Lexicon:
    """기본 테이블 중 일부만 교체한 Lexicon 생성

    문자열 패턴을 넘기면 컴파일해서 사용합니다.

    사용 예시:
        >>> lex = build_lexicon(unit_tokens=frozenset({"m", "㎡", "式"}))
    """
    compiled = {}
    for key, value in overrides.items():
        if key.endswith("_pattern") and isinstance(value, str):
            flags = re.IGNORECASE if key in {"size_pattern", "spec_pattern", "work_name_pattern"} else 0
            value = re.compile(value, flags)
        elif key == "unit_tokens":
            value = frozenset(value)
        elif key == "tread_keywords":
            value = tuple(value)
        compiled[key] = value
    return replace(get_default_lexicon(), **compiled)


@lru_cache(maxsize=1)
def get_default_lexicon() -> Lexicon:
    """기본 어휘 사전 (캐시)"""
    return Lexicon()
