"""LLM 제공자 어댑터 패키지"""

from .base import BaseLLMService, LLMResponse, Message
from .dummy_llm import DummyLLM
from .factory import get_llm_service

__all__ = [
    "BaseLLMService",
    "LLMResponse",
    "Message",
    "DummyLLM",
    "get_llm_service",
]
