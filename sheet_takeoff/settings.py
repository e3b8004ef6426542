"""애플리케이션 설정 관리"""

import logging
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# .env 파일 로드
load_dotenv()

# 프로젝트 루트 디렉토리
ROOT_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # LLM 설정
    llm_provider: Literal["openai", "anthropic", "dummy"] = Field(
        default="openai", description="LLM 제공자 (openai | anthropic | dummy)"
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API 키")
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API 키")

    # 모델 설정
    openai_model: str = Field(default="gpt-4o", description="OpenAI 모델명")
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022", description="Anthropic 모델명"
    )

    # 치수 추출 오라클(LLM) 설정
    size_oracle_enabled: bool = Field(default=True, description="LLM 치수 추출 사용 여부")
    size_oracle_model: str = Field(
        default="gpt-4o-mini", description="치수 추출에 사용할 모델명 (OpenAI 사용 시)"
    )
    size_oracle_max_batch: int = Field(
        default=200, description="한 번의 오라클 요청에 담을 최대 행 수"
    )
    size_oracle_timeout_seconds: float = Field(
        default=60.0, description="오라클 요청 타임아웃 (초)"
    )
    size_oracle_max_tokens: int = Field(default=4096, description="오라클 응답 최대 토큰")

    # 앱 설정
    app_debug: bool = Field(default=False, description="디버그 모드")
    log_level: str = Field(default="INFO", description="로그 레벨")
    preview_limit: int = Field(default=30, description="결과 미리보기 최대 행 수")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """루트 로거 설정 (진입점에서 한 번만 호출)"""
    name = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def oracle_credential_configured() -> bool:
    """선택된 LLM 제공자의 API 키가 설정되어 있는지 여부"""
    if settings.llm_provider == "openai":
        return bool(settings.openai_api_key)
    if settings.llm_provider == "anthropic":
        return bool(settings.anthropic_api_key)
    # dummy는 키가 필요 없음
    return True


def validate_settings() -> dict[str, str]:
    """설정 유효성 검사 및 경고 메시지 반환"""
    warnings = {}

    # LLM 설정 검증
    if settings.llm_provider == "openai":
        if not settings.openai_api_key:
            warnings["llm"] = "OpenAI API 사용을 위해서는 OPENAI_API_KEY가 필요합니다."
    elif settings.llm_provider == "anthropic":
        if not settings.anthropic_api_key:
            warnings["llm"] = (
                "Anthropic API 사용을 위해서는 ANTHROPIC_API_KEY가 필요합니다."
            )

    # 오라클 설정 검증
    if settings.size_oracle_enabled and "llm" in warnings:
        warnings["size_oracle"] = (
            "API 키가 없어 치수 추출은 규칙 기반으로만 동작합니다."
        )
    if settings.size_oracle_max_batch <= 0:
        warnings["size_oracle_max_batch"] = (
            "SIZE_ORACLE_MAX_BATCH가 0 이하이면 오라클 요청이 전송되지 않습니다."
        )

    return warnings
