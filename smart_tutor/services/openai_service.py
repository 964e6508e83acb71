# services/openai_service.py
# OpenAI 채팅 완성 API 게이트웨이 서비스 (API 키는 서버에만 보관)

import logging
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from smart_tutor.config import settings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """게이트웨이가 호출자에게 돌려주는 오류 (상태 코드 + 공개 메시지)"""

    status_code = 500
    public_message = "Failed to fetch from OpenAI"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message
        if status_code is not None:
            self.status_code = status_code


class MissingPromptError(GatewayError):
    status_code = 400
    public_message = "Missing prompt"


class GatewayConfigError(GatewayError):
    status_code = 500
    public_message = "API key not configured"


class UpstreamError(GatewayError):
    public_message = "OpenAI API request failed"


class EmptyUpstreamResponseError(GatewayError):
    status_code = 500
    public_message = "Empty response from OpenAI"


class CompletionGateway:
    """OpenAI 채팅 완성 API 중계 서비스"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        # API 키 설정
        self.api_key = settings.openai_api_key if api_key is None else api_key
        if not self.api_key:
            logger.warning("OPENAI_API_KEY가 설정되지 않았습니다. /api/chat 요청은 실패합니다.")
            self.client = None
        else:
            # 재시도 없이 한 번만 호출
            self.client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
            logger.info("OpenAI 클라이언트 초기화 완료")

        self.model = model or settings.openai_model
        self.temperature = settings.openai_temperature if temperature is None else temperature

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def build_payload(self, prompt: str, is_json: bool = False) -> Dict[str, Any]:
        """업스트림 요청 본문 구성"""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        if is_json:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def complete(self, prompt: Optional[str], is_json: bool = False) -> str:
        """프롬프트를 업스트림에 전달하고 첫 번째 응답 텍스트를 반환"""

        if not prompt or not prompt.strip():
            raise MissingPromptError()

        if not self.client:
            raise GatewayConfigError()

        payload = self.build_payload(prompt, is_json)
        logger.info(f"OpenAI 요청: model={self.model}, json={is_json} - {prompt[:50]}...")

        try:
            response = await self.client.chat.completions.create(**payload)
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error ({e.status_code}): {e.body if e.body is not None else e.message}")
            raise UpstreamError(status_code=e.status_code) from e
        except Exception as e:
            logger.error(f"Proxy error: {e}")
            raise GatewayError() from e

        text = self._extract_text(response)
        if not text:
            logger.error("OpenAI 응답에 내용이 없습니다.")
            raise EmptyUpstreamResponseError()

        logger.info(f"OpenAI 응답 수신: {len(text)}자")
        return text

    @staticmethod
    def _extract_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return content.strip() if content else ""


# 전역 인스턴스
completion_gateway = CompletionGateway()
