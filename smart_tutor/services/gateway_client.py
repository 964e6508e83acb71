# services/gateway_client.py
# 튜터 앱 -> 완성 게이트웨이(/api/chat) 호출 클라이언트

import json
import logging
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from smart_tutor.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class GatewayCallError(Exception):
    """게이트웨이 호출 실패 (네트워크, 비정상 상태 코드, 빈 응답)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StructuredResponseError(GatewayCallError):
    """JSON 응답을 요청했지만 파싱/검증에 실패"""


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class StructuredJson(Generic[T]):
    value: T
    raw: dict


class GatewayClient:
    """/api/chat 게이트웨이 비동기 클라이언트"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.resolved_gateway_url()).rstrip("/")
        self._transport = transport
        # None 이면 시간 제한 없음
        self.timeout = settings.gateway_timeout if timeout is None else timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, transport=self._transport, timeout=self.timeout
            )
        return self._client

    async def aclose(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def _post(self, prompt: str, is_json: bool) -> str:
        try:
            response = await self._get_client().post("/api/chat", json={"prompt": prompt, "isJson": is_json})
        except httpx.HTTPError as e:
            logger.error(f"게이트웨이 연결 오류: {e}")
            raise GatewayCallError(f"게이트웨이 연결 실패: {e}") from e

        if response.status_code != 200:
            try:
                detail = response.json().get("error")
            except (ValueError, AttributeError):
                detail = response.text
            logger.error(f"게이트웨이 오류 응답 ({response.status_code}): {detail}")
            raise GatewayCallError(f"API call failed with status: {response.status_code}", response.status_code)

        try:
            text = response.json().get("text")
        except (ValueError, AttributeError) as e:
            raise GatewayCallError("게이트웨이 응답 형식이 올바르지 않습니다.") from e

        if not text or not isinstance(text, str) or not text.strip():
            raise GatewayCallError("No content received from API.")
        return text.strip()

    async def request_text(self, prompt: str) -> PlainText:
        """일반 텍스트 응답 요청"""
        return PlainText(text=await self._post(prompt, is_json=False))

    async def request_structured(self, prompt: str, model: Type[T]) -> StructuredJson[T]:
        """JSON 응답 요청 후 모델로 검증"""
        text = await self._post(prompt, is_json=True)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"JSON 파싱 실패: {text[:100]}")
            raise StructuredResponseError("JSON 응답을 파싱할 수 없습니다.") from e

        if not isinstance(raw, dict):
            raise StructuredResponseError("JSON 객체가 아닌 응답입니다.")

        try:
            value = model.model_validate(raw)
        except ValidationError as e:
            logger.error(f"{model.__name__} 검증 실패: {e}")
            raise StructuredResponseError(f"{model.__name__} 형식이 올바르지 않습니다.") from e

        return StructuredJson(value=value, raw=raw)
