"""
Takeoff prompts module.

이 패키지는 치수 추출 오라클에 사용되는 LLM 프롬프트를 중앙 관리합니다.
"""

from .size_extraction import (
    SIZE_EXTRACTION_SYSTEM_PROMPT,
    SIZE_EXTRACTION_USER_TEMPLATE,
    format_size_extraction_user_prompt,
)

__all__ = [
    # 치수 추출
    "SIZE_EXTRACTION_SYSTEM_PROMPT",
    "SIZE_EXTRACTION_USER_TEMPLATE",
    "format_size_extraction_user_prompt",
]
