# tests/test_gateway_client.py - 튜터 앱 -> 게이트웨이 클라이언트 테스트

import asyncio
import json

import httpx
import pytest

from smart_tutor.main import app, get_completion_gateway
from smart_tutor.models import Evaluation, Question
from smart_tutor.services.domains import Domain
from smart_tutor.services.gateway_client import (
    GatewayCallError,
    GatewayClient,
    PlainText,
    StructuredJson,
    StructuredResponseError,
)
from smart_tutor.services.tutor_service import TutorSession


def _client(handler) -> GatewayClient:
    return GatewayClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))


async def test_request_text_sends_prompt_and_returns_plain_text():
    seen = {}

    def handler(request: httpx.Request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"text": "  힌트입니다.  "})

    result = await _client(handler).request_text("hint please")

    assert result == PlainText(text="힌트입니다.")
    assert seen["path"] == "/api/chat"
    assert seen["body"] == {"prompt": "hint please", "isJson": False}


async def test_request_structured_validates_model():
    upstream_json = {"isCorrect": False, "feedback": "다시 생각해 보세요."}

    def handler(request: httpx.Request):
        assert json.loads(request.content)["isJson"] is True
        return httpx.Response(200, json={"text": json.dumps(upstream_json, ensure_ascii=False)})

    result = await _client(handler).request_structured("grade", Evaluation)

    assert isinstance(result, StructuredJson)
    assert result.value == Evaluation(**upstream_json)
    assert json.loads(json.dumps(result.raw)) == upstream_json


async def test_invalid_json_text_is_structured_error():
    def handler(request):
        return httpx.Response(200, json={"text": "Sure! Here is your question."})

    with pytest.raises(StructuredResponseError):
        await _client(handler).request_structured("generate", Question)


async def test_json_array_is_structured_error():
    def handler(request):
        return httpx.Response(200, json={"text": "[1, 2, 3]"})

    with pytest.raises(StructuredResponseError):
        await _client(handler).request_structured("generate", Question)


async def test_model_mismatch_is_structured_error():
    def handler(request):
        return httpx.Response(200, json={"text": '{"type": "Math"}'})

    with pytest.raises(StructuredResponseError):
        await _client(handler).request_structured("generate", Question)


async def test_error_status_carries_code():
    def handler(request):
        return httpx.Response(429, json={"error": "OpenAI API request failed"})

    with pytest.raises(GatewayCallError) as exc_info:
        await _client(handler).request_text("hi")

    assert exc_info.value.status_code == 429
    assert not isinstance(exc_info.value, StructuredResponseError)


async def test_connection_failure_is_call_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GatewayCallError):
        await _client(handler).request_text("hi")


async def test_missing_text_is_call_error():
    def handler(request):
        return httpx.Response(200, json={"text": ""})

    with pytest.raises(GatewayCallError):
        await _client(handler).request_text("hi")


async def test_round_trip_through_gateway_app(gateway_factory):
    question = {"type": "Analogy", "passage": "", "question": "Hot is to cold as up is to ?", "answer": "down"}
    upstream = gateway_factory(content=json.dumps(question))
    app.dependency_overrides[get_completion_gateway] = lambda: upstream
    client = GatewayClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    try:
        result = await client.request_structured("generate", Question)
    finally:
        await client.aclose()
        app.dependency_overrides.clear()

    assert result.value.model_dump() == question
    assert upstream.client.chat.completions.create.call_args.kwargs["response_format"] == {"type": "json_object"}


# === 느린 게이트웨이 ===

async def _start_slow_gateway(delay: float, text: str):
    """실제 소켓으로 /api/chat 에 delay 초 뒤 응답하는 서버"""

    async def handle(reader, writer):
        head = await reader.readuntil(b"\r\n\r\n")
        length = 0
        for line in head.decode("latin-1").split("\r\n"):
            if line.lower().startswith("content-length:"):
                length = int(line.split(":", 1)[1])
        if length:
            await reader.readexactly(length)
        await asyncio.sleep(delay)
        payload = json.dumps({"text": text}).encode("utf-8")
        writer.write(
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
            + f"Content-Length: {len(payload)}\r\nConnection: close\r\n\r\n".encode("latin-1")
            + payload
        )
        await writer.drain()
        writer.close()

    return await asyncio.start_server(handle, "127.0.0.1", 0)


def test_client_has_no_read_timeout_by_default():
    client = GatewayClient(base_url="http://gateway.test")

    timeout = client._get_client().timeout

    assert timeout.read is None
    assert timeout.connect is None


def test_explicit_timeout_is_applied():
    client = GatewayClient(base_url="http://gateway.test", timeout=30.0)

    assert client._get_client().timeout.read == 30.0


async def test_generation_survives_gateway_slower_than_five_seconds():
    question = {"type": "Word Problem", "passage": "", "question": "What is 7 x 8? (A) 54 (B) 56", "answer": "(B) 56"}
    server = await _start_slow_gateway(6.0, json.dumps(question))
    port = server.sockets[0].getsockname()[1]
    session = TutorSession(gateway=GatewayClient(base_url=f"http://127.0.0.1:{port}"))
    try:
        async with server:
            await session.generate_question(Domain.MATH)
    finally:
        await session.gateway.aclose()

    assert session.generation_error is None
    assert session.question is not None
    assert session.question.model_dump() == question
