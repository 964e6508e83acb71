"""
애플리케이션 설정 파일
smart_tutor/config.py
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # 기본 설정
    app_name: str = "11+ Smart Tutor"
    app_version: str = "1.0.0"
    environment: str = "development"

    # 서버 설정
    host: str = "0.0.0.0"
    port: int = 3001

    # 튜터 앱이 호출할 게이트웨이 주소 (비어 있으면 http://127.0.0.1:<port>)
    gateway_url: Optional[str] = None
    # 게이트웨이 호출 시간 제한(초), 비어 있으면 제한 없음
    gateway_timeout: Optional[float] = None

    # OpenAI 설정 - 키는 게이트웨이만 보관한다
    openai_api_key: str = Field(
        "",
        validation_alias=AliasChoices("OPENAI_API_KEY", "VITE_OPENAI_API_KEY"),
    )
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.7

    # 로깅 설정
    log_level: str = "INFO"

    # CORS 설정
    cors_origins: List[str] = ["*"]

    def resolved_gateway_url(self) -> str:
        if self.gateway_url:
            return self.gateway_url.rstrip("/")
        return f"http://127.0.0.1:{self.port}"


# 전역 설정 인스턴스
settings = Settings()


def validate_settings(current: Optional[Settings] = None) -> List[str]:
    """중요한 설정들이 제대로 되어 있는지 확인하고 오류 목록을 반환"""
    current = current or settings
    errors = []

    if not current.openai_api_key:
        errors.append("OPENAI_API_KEY가 설정되지 않았습니다.")

    if current.environment not in ["development", "production", "testing"]:
        errors.append("ENVIRONMENT는 development, production, testing 중 하나여야 합니다.")

    if not 0.0 <= current.openai_temperature <= 2.0:
        errors.append("OPENAI_TEMPERATURE는 0.0 ~ 2.0 사이여야 합니다.")

    return errors


if __name__ == "__main__":
    # 설정 테스트
    print("🔍 설정 확인 중...")
    print(f"앱 이름: {settings.app_name}")
    print(f"환경: {settings.environment}")
    print(f"포트: {settings.port}")
    print(f"OpenAI 모델: {settings.openai_model}")
    print(f"게이트웨이: {settings.resolved_gateway_url()}")

    problems = validate_settings()
    if problems:
        print("❌ 설정 오류:")
        for problem in problems:
            print(f"  - {problem}")
        print("\n📝 .env 파일을 확인해주세요.")
    else:
        print("✅ 모든 설정이 올바르게 구성되었습니다!")
