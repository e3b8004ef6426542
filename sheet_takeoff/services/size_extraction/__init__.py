"""치수 추출 패키지

주요 모듈:
- text_normalizer: NFKC/하이픈/공백 정규화
- dimension_extractor: 규칙 기반 H/W/L/重ね 추출
- sanitizer: 단위·수량과 모순되는 치수 제거 (SizeSanitizer)
- oracle: LLM 치수 추출 오라클 인터페이스와 구현체
- merge_policy: 규칙 + 오라클 병합 정책 (OracleMergePolicy)
"""

from .dimension_extractor import extract_dimensions, fill_missing, should_skip_row
from .merge_policy import EnrichmentResult, OracleMergePolicy, SizeRow, compute_suggested_input
from .oracle import LLMSizeOracle, NullSizeOracle, SizeOracle, get_size_oracle
from .sanitizer import SanitizerSettings, SizeSanitizer, sanitize_size

__all__ = [
    # 추출
    "extract_dimensions",
    "fill_missing",
    "should_skip_row",
    # 보정
    "SanitizerSettings",
    "SizeSanitizer",
    "sanitize_size",
    # 오라클
    "SizeOracle",
    "NullSizeOracle",
    "LLMSizeOracle",
    "get_size_oracle",
    # 병합
    "OracleMergePolicy",
    "SizeRow",
    "EnrichmentResult",
    "compute_suggested_input",
]
