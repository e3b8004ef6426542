"""
치수 추출 오라클 (size_extraction/oracle)
-----------------------------------------------------
LLM 에 단위 m 행을 한 번에 보내 치수를 추론받는 외부 협력자 인터페이스입니다.

계약
- 요청: [{id, text, unit, qty}, ...] (JSON 배열)
- 응답: [{id, heightMm?, wideMm?, lengthMm?, overlapMm?, suggestedInput?, calcM2?}, ...]
- 응답이 ```json 펜스로 감싸져 있거나 끝에 콤마가 남아 있어도 보정 후 파싱
- 잘못된 항목은 개별로 버리고, 호출/파싱 자체가 실패하면 빈 dict 반환 (예외를 올리지 않음)

오라클의 suggestedInput / calcM2 는 받지 않습니다. 두 값은 항상 로컬에서 다시 계산합니다.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
import json
import logging
import re

from pydantic import ValidationError

from sheet_takeoff.models.envelopes import OracleResponseItem, PendingExtraction, SizeResult
from sheet_takeoff.prompts import (
    SIZE_EXTRACTION_SYSTEM_PROMPT,
    format_size_extraction_user_prompt,
)
from sheet_takeoff.services.llm import BaseLLMService, get_llm_service
from sheet_takeoff.settings import oracle_credential_configured, settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")


class SizeOracle(ABC):
    """치수 추출 오라클 인터페이스"""

    @abstractmethod
    def extract_sizes(self, batch: Sequence[PendingExtraction]) -> Dict[int, SizeResult]:
        """id → 오라클이 준 필드만 채운 SizeResult"""


class NullSizeOracle(SizeOracle):
    """항상 빈 결과 (오라클 비활성/자격 증명 없음)"""

    def extract_sizes(self, batch: Sequence[PendingExtraction]) -> Dict[int, SizeResult]:
        return {}


def repair_json_text(text: str) -> str:
    """LLM 응답을 JSON 파싱 가능한 형태로 최대한 복구

    - 앞뒤 코드 펜스 제거
    - 첫 '[' ~ 마지막 ']' 구간만 사용 (배열이 없으면 객체 구간)
    - 닫는 괄호 앞 trailing comma 제거
    """
    t = _FENCE_RE.sub("", (text or "").strip()).strip()
    first, last = t.find("["), t.rfind("]")
    if first >= 0 and last > first:
        t = t[first:last + 1]
    else:
        first, last = t.find("{"), t.rfind("}")
        if first >= 0 and last > first:
            t = t[first:last + 1]
    return _TRAILING_COMMA_RE.sub(r"\1", t)


def parse_oracle_response(text: str) -> Dict[int, SizeResult]:
    """응답 본문 → id 별 SizeResult

    Raises:
        json.JSONDecodeError: 복구 후에도 JSON 이 아닐 때
    """
    data: Any = json.loads(repair_json_text(text))
    if isinstance(data, dict):
        # {"items": [...]} 형태도 허용
        data = data.get("items", [])
    if not isinstance(data, list):
        return {}

    out: Dict[int, SizeResult] = {}
    for raw in data:
        if not isinstance(raw, dict):
            continue
        try:
            item = OracleResponseItem.model_validate(raw)
            out[item.id] = item.to_size_result()
        except ValidationError as e:
            logger.debug("drop oracle item %r: %s", raw, e.errors()[:1])
        except (ValueError, OverflowError) as e:
            logger.debug("drop oracle item %r: %s", raw, e)
    return out


class LLMSizeOracle(SizeOracle):
    """LLM 기반 치수 추출 오라클 (작업당 1회 요청)"""

    def __init__(
        self,
        llm_service: BaseLLMService,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        self.llm_service = llm_service
        self.model = model
        self.max_tokens = max_tokens or settings.size_oracle_max_tokens

    def extract_sizes(self, batch: Sequence[PendingExtraction]) -> Dict[int, SizeResult]:
        if not batch:
            return {}

        items: List[dict] = [p.model_dump() for p in batch]
        kwargs: Dict[str, Any] = {"temperature": 0, "max_tokens": self.max_tokens}
        if self.model:
            kwargs["model"] = self.model

        try:
            text = self.llm_service.chat(
                format_size_extraction_user_prompt(items),
                system_message=SIZE_EXTRACTION_SYSTEM_PROMPT,
                **kwargs,
            )
        except Exception as e:
            logger.warning("size oracle request failed (%s): %s", type(e).__name__, e)
            return {}

        try:
            result = parse_oracle_response(text)
        except json.JSONDecodeError as e:
            logger.warning("size oracle returned malformed JSON: %s", e)
            return {}
        except Exception as e:
            logger.warning("size oracle response rejected (%s): %s", type(e).__name__, e)
            return {}

        # 요청하지 않은 id 는 무시
        requested = {p.id for p in batch}
        dropped = [k for k in result if k not in requested]
        for k in dropped:
            del result[k]
        if dropped:
            logger.debug("size oracle returned unknown ids: %s", dropped)
        return result


def get_size_oracle() -> SizeOracle:
    """설정에 따라 적절한 오라클 반환"""
    if not settings.size_oracle_enabled:
        return NullSizeOracle()
    if not oracle_credential_configured():
        logger.warning(
            "size oracle disabled: no API key for provider %r, using rule-based extraction only",
            settings.llm_provider,
        )
        return NullSizeOracle()

    model = settings.size_oracle_model if settings.llm_provider == "openai" else None
    return LLMSizeOracle(get_llm_service(), model=model)
