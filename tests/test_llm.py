"""LLM 서비스 테스트"""

from types import SimpleNamespace

import pytest

from sheet_takeoff.services.llm import get_llm_service
from sheet_takeoff.services.llm.anthropic_llm import AnthropicLLM
from sheet_takeoff.services.llm.base import Message
from sheet_takeoff.services.llm.dummy_llm import DummyLLM
from sheet_takeoff.services.llm.openai_llm import OpenAILLM
from sheet_takeoff.settings import settings


def test_dummy_llm_generate(dummy_llm_service):
    """더미 LLM 응답 생성 테스트"""
    messages = [
        Message(role="system", content="You extract sizes."),
        Message(role="user", content="[]"),
    ]

    response = dummy_llm_service.generate(messages, temperature=0)

    assert response.content == "[]"
    assert response.model == "dummy-model"
    assert response.usage is not None
    assert response.metadata["provider"] == "dummy"
    assert dummy_llm_service.calls == [messages]
    assert dummy_llm_service.call_kwargs == [{"temperature": 0}]


def test_dummy_llm_chat(dummy_llm_service):
    """더미 LLM 간단한 채팅 테스트"""
    response = dummy_llm_service.chat("Extract sizes", system_message="You extract sizes.")

    assert response == "[]"
    assert isinstance(response, str)
    system, user = dummy_llm_service.calls[0]
    assert system.role == "system"
    assert user.content == "Extract sizes"


def test_dummy_llm_chat_without_system():
    """시스템 메시지 없이 호출"""
    llm = DummyLLM(response='[{"id": 1}]')
    assert llm.chat("hi") == '[{"id": 1}]'
    assert [m.role for m in llm.calls[0]] == ["user"]


def test_dummy_llm_error():
    """장애 시뮬레이션"""
    llm = DummyLLM(error=ConnectionError("offline"))
    with pytest.raises(ConnectionError):
        llm.chat("hi")


class TestFactory:
    """get_llm_service() 테스트"""

    def test_dummy(self):
        assert isinstance(get_llm_service("dummy"), DummyLLM)

    def test_openai(self, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        service = get_llm_service("openai", model="gpt-4o-mini")
        assert isinstance(service, OpenAILLM)
        assert service.model == "gpt-4o-mini"

    def test_anthropic(self, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", "sk-ant-test")
        service = get_llm_service("anthropic")
        assert isinstance(service, AnthropicLLM)
        assert service.model == settings.anthropic_model

    def test_provider_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_provider", "dummy")
        assert isinstance(get_llm_service(), DummyLLM)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_llm_service("gemini")


class _Recorder:
    """SDK create() 호출을 기록하고 준비된 응답을 반환"""

    def __init__(self, response):
        self.response = response
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


class TestProviderAdapters:
    """SDK 응답 → LLMResponse 변환 테스트 (네트워크 없음)"""

    def test_openai_generate(self):
        completions = _Recorder(
            SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content='[{"id": 1}]'))],
                model="gpt-4o-mini",
                usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
            )
        )
        service = OpenAILLM(api_key="sk-test", model="gpt-4o")
        service.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

        text = service.chat("items", system_message="extract", model="gpt-4o-mini", temperature=0)

        assert text == '[{"id": 1}]'
        assert completions.kwargs["model"] == "gpt-4o-mini"
        assert completions.kwargs["temperature"] == 0
        assert completions.kwargs["messages"][0] == {"role": "system", "content": "extract"}

    def test_anthropic_generate(self):
        messages = _Recorder(
            SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="[{"),
                    SimpleNamespace(type="text", text='"id": 2}]'),
                ],
                model="claude-test",
                usage=SimpleNamespace(input_tokens=10, output_tokens=5),
                stop_reason="end_turn",
            )
        )
        service = AnthropicLLM(api_key="sk-ant-test")
        service.client = SimpleNamespace(messages=messages)

        response = service.generate(
            [Message(role="system", content="extract"), Message(role="user", content="items")],
            temperature=0,
            max_tokens=256,
        )

        assert response.content == '[{"id": 2}]'
        assert response.metadata["stop_reason"] == "end_turn"
        assert messages.kwargs["system"] == "extract"
        assert messages.kwargs["max_tokens"] == 256
        assert messages.kwargs["messages"] == [{"role": "user", "content": "items"}]
