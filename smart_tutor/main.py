# smart_tutor/main.py
# FastAPI 메인 서버 - 11+ 스마트 튜터 (OpenAI 게이트웨이 + 튜터 단일 페이지)

from dotenv import load_dotenv

load_dotenv()

import logging
import traceback
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Form, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from smart_tutor.config import settings, validate_settings
from smart_tutor.models import ChatRequest, ChatResponse, ErrorResponse
from smart_tutor.services.openai_service import CompletionGateway, GatewayError, completion_gateway
from smart_tutor.services.tutor_service import TutorSession, tutor_session
from smart_tutor.view import render_page

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 서버 시작 시 실행될 코드
    logger.info(f"🚀 {settings.app_name} 서버 시작 (포트 {settings.port})")
    # 다른 포트로 띄웠다면 PORT 또는 GATEWAY_URL 을 실제 주소에 맞춰야 한다
    logger.info(f"🔗 튜터 게이트웨이 주소: {tutor_session.gateway.base_url}")
    for problem in validate_settings():
        logger.warning(f"⚠️ 설정 오류: {problem}")

    yield

    # 서버 종료 시 게이트웨이 연결 정리
    await tutor_session.gateway.aclose()
    logger.info("🌙 서버를 종료합니다.")


app = FastAPI(
    title="11+ Smart Tutor API",
    description="""
    11+ 시험 대비 AI 튜터

    ## 주요 기능
    * **문제 생성**: 과목별 새 문제를 OpenAI로 생성
    * **힌트**: 정답을 알려주지 않는 한 문장 힌트
    * **채점**: 서술형/객관식 답안 자동 채점
    * **AI 튜터 채팅**: 현재 문제를 문맥으로 한 질의응답

    ## 게이트웨이
    브라우저는 API 키를 갖지 않으며, 모든 OpenAI 호출은 `POST /api/chat` 을 통해 중계됩니다.
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url=None,
    openapi_url="/openapi.json"
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """HTTP 예외를 {"error": ...} 형식으로 처리합니다."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """잘못된 요청 본문은 400으로 처리합니다."""
    logger.warning(f"잘못된 요청 ({request.url.path}): {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """처리되지 않은 모든 예외를 일관된 JSON 형식으로 처리합니다."""
    logger.error(f"예상치 못한 서버 오류 발생: {exc}")
    logger.error(f"상세 스택 트레이스:\n{traceback.format_exc()}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def get_completion_gateway() -> CompletionGateway:
    return completion_gateway


def get_tutor_session() -> TutorSession:
    return tutor_session


# === 시스템 ===

@app.get("/health", tags=["System"], summary="서비스 상태 체크")
async def health_check(gateway: CompletionGateway = Depends(get_completion_gateway)):
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "healthy": gateway.is_configured,
        "services": {"openai": gateway.is_configured},
    }


# === 완성 게이트웨이 ===

@app.post(
    "/api/chat",
    tags=["Gateway"],
    summary="OpenAI 채팅 완성 중계",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat_completion(request: ChatRequest, gateway: CompletionGateway = Depends(get_completion_gateway)):
    try:
        text = await gateway.complete(request.prompt, is_json=bool(request.isJson))
    except GatewayError as e:
        raise HTTPException(status_code=e.status_code, detail=e.public_message)
    return ChatResponse(text=text)


# === 튜터 페이지 ===

def _back_to_page() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


@app.get("/", response_class=HTMLResponse, tags=["Tutor"], summary="튜터 페이지")
async def tutor_page(session: TutorSession = Depends(get_tutor_session)):
    return HTMLResponse(render_page(session.snapshot()))


@app.get("/tutor/state", tags=["Tutor"], summary="현재 화면 상태")
async def tutor_state(session: TutorSession = Depends(get_tutor_session)):
    return session.snapshot()


@app.post("/tutor/domain", tags=["Tutor"], summary="과목 선택")
async def select_domain(domain: str = Form(...), session: TutorSession = Depends(get_tutor_session)):
    try:
        session.select_domain(domain)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _back_to_page()


@app.post("/tutor/generate", tags=["Tutor"], summary="새 문제 생성")
async def generate_question(domain: str = Form(...), session: TutorSession = Depends(get_tutor_session)):
    try:
        await session.generate_question(domain)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _back_to_page()


@app.post("/tutor/hint", tags=["Tutor"], summary="힌트 요청")
async def request_hint(session: TutorSession = Depends(get_tutor_session)):
    await session.request_hint()
    return _back_to_page()


@app.post("/tutor/answer", tags=["Tutor"], summary="답안 제출 및 채점")
async def submit_answer(answer: str = Form(""), session: TutorSession = Depends(get_tutor_session)):
    await session.submit_answer(answer)
    return _back_to_page()


@app.post("/tutor/answer/reveal", tags=["Tutor"], summary="정답 보기/숨기기")
async def toggle_answer(session: TutorSession = Depends(get_tutor_session)):
    session.toggle_answer_reveal()
    return _back_to_page()


@app.post("/tutor/chat", tags=["Tutor"], summary="AI 튜터에게 질문")
async def send_chat(message: str = Form(""), session: TutorSession = Depends(get_tutor_session)):
    session.open_chat()
    await session.send_chat(message)
    return _back_to_page()


@app.post("/tutor/chat/toggle", tags=["Tutor"], summary="채팅 창 열기/닫기")
async def toggle_chat(session: TutorSession = Depends(get_tutor_session)):
    session.toggle_chat()
    return _back_to_page()


# === 서버 실행 ===

def run():
    logger.info(f"🚀 API proxy listening on {settings.port}")
    uvicorn.run(
        "smart_tutor.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
