"""LLM 서비스 팩토리"""

from sheet_takeoff.settings import settings

from .anthropic_llm import AnthropicLLM
from .base import BaseLLMService
from .dummy_llm import DummyLLM
from .openai_llm import OpenAILLM


def get_llm_service(provider: str | None = None, model: str | None = None) -> BaseLLMService:
    """설정에 따라 적절한 LLM 서비스 반환

    Args:
        provider: 제공자 이름 (None이면 settings.llm_provider)
        model: 모델명 재정의 (None이면 제공자별 기본 모델)

    Returns:
        BaseLLMService 인스턴스
    """
    name = provider or settings.llm_provider
    if name == "openai":
        return OpenAILLM(model=model)
    elif name == "anthropic":
        return AnthropicLLM(model=model)
    elif name == "dummy":
        return DummyLLM()
    else:
        raise ValueError(f"지원하지 않는 LLM 제공자: {name}")
