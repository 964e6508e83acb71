# tests/conftest.py
import asyncio
import json
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from smart_tutor.main import app, get_completion_gateway
from smart_tutor.services.gateway_client import PlainText, StructuredJson, StructuredResponseError
from smart_tutor.services.openai_service import CompletionGateway


def completion(content: Optional[str]):
    """openai 채팅 완성 응답 흉내"""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_gateway(content: Optional[str] = "ok", api_key: str = "sk-test") -> CompletionGateway:
    gateway = CompletionGateway(api_key=api_key, model="gpt-4o", temperature=0.7)
    if api_key:
        gateway.client = MagicMock()
        gateway.client.chat.completions.create = AsyncMock(return_value=completion(content))
    return gateway


class StubGateway:
    """GatewayClient 대역 - 미리 넣어 둔 응답을 순서대로 돌려준다

    응답 항목이 Exception 이면 raise, asyncio.Event 와 함께 넣으면 이벤트까지 대기한다.
    """

    def __init__(self, responses: Optional[List] = None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []

    def push(self, response, gate: Optional[asyncio.Event] = None):
        self.responses.append((response, gate))

    async def _next(self, prompt):
        self.prompts.append(prompt)
        item = self.responses.pop(0)
        response, gate = item if isinstance(item, tuple) else (item, None)
        if gate is not None:
            await gate.wait()
        if isinstance(response, Exception):
            raise response
        return response

    async def request_text(self, prompt):
        response = await self._next(prompt)
        return PlainText(text=response)

    async def request_structured(self, prompt, model):
        response = await self._next(prompt)
        if isinstance(response, str):
            try:
                response = json.loads(response)
            except ValueError as e:
                raise StructuredResponseError("bad json") from e
        try:
            return StructuredJson(value=model.model_validate(response), raw=response)
        except Exception as e:
            raise StructuredResponseError("invalid") from e

    async def aclose(self):
        pass


@pytest.fixture
def stub_gateway():
    return StubGateway()


@pytest.fixture
def upstream():
    return make_gateway()


@pytest.fixture
def api_client(upstream):
    app.dependency_overrides[get_completion_gateway] = lambda: upstream
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def gateway_factory():
    return make_gateway
