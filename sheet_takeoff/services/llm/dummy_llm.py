"""더미 LLM 구현 (테스트/오프라인용)"""

from .base import BaseLLMService, LLMResponse, Message


class DummyLLM(BaseLLMService):
    """미리 정해진 응답을 돌려주는 더미 LLM 서비스

    네트워크 없이 오라클 경로(프롬프트 구성 → 응답 파싱 → 병합)를 검증할 때 사용합니다.
    """

    provider = "dummy"

    def __init__(self, response: str = "[]", error: Exception | None = None):
        """
        Args:
            response: generate()가 돌려줄 응답 본문
            error: 지정하면 generate() 호출 시 이 예외를 발생시킴 (장애 시뮬레이션)
        """
        self.response = response
        self.error = error
        self.calls: list[list[Message]] = []
        self.call_kwargs: list[dict] = []

    def generate(self, messages: list[Message], **kwargs) -> LLMResponse:
        """더미 응답 생성

        Args:
            messages: 대화 메시지 리스트 (호출 기록에 남김)
            **kwargs: 추가 파라미터 (호출 기록에만 남김)

        Returns:
            LLMResponse 객체
        """
        self.calls.append(list(messages))
        self.call_kwargs.append(dict(kwargs))
        if self.error is not None:
            raise self.error

        return LLMResponse(
            content=self.response,
            model="dummy-model",
            usage={"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
            metadata={"provider": "dummy"},
        )
