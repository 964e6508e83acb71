# services/tutor_service.py
# 11+ 튜터 화면 상태 머신 (과목 선택, 문제 생성, 힌트, 채점, 채팅)

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Union

from smart_tutor.models import Evaluation, Question
from smart_tutor.services.domains import Domain, all_domains
from smart_tutor.services.gateway_client import GatewayClient
from smart_tutor.services.prompt_builder import (
    build_chat_prompt,
    build_grading_prompt,
    build_hint_prompt,
    build_question_prompt,
)
from smart_tutor.services.question_parser import parse_options

logger = logging.getLogger(__name__)

USER = "user"
ASSISTANT = "assistant"

CHAT_GREETING = "안녕하세요! 현재 문제나 다른 11+ 관련 질문이 있다면 무엇이든 물어보세요."
CHAT_FAILED_MESSAGE = "죄송해요, 답변을 가져오는 데 문제가 생겼어요. 잠시 후 다시 시도해주세요."
HINT_FAILED_MESSAGE = "힌트를 가져오는 데 실패했습니다. 다시 시도해주세요."
GENERATION_FAILED_TEMPLATE = "'{domain}' 문제를 생성하는 데 실패했습니다. 잠시 후 다시 시도해 주세요."

# 지문은 이 길이를 넘을 때만 표시
MIN_PASSAGE_LENGTH = 10


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    text: str


def _to_domain(domain: Union[Domain, str]) -> Domain:
    if isinstance(domain, Domain):
        return domain
    found = Domain.from_label(domain)
    if found is None:
        raise ValueError(f"알 수 없는 과목입니다: {domain}")
    return found


class TutorSession:
    """브라우저 탭 하나에 해당하는 튜터 화면 상태

    각 행동(생성, 힌트, 채점, 채팅)은 동시에 하나의 호출만 진행하며,
    진행 중 플래그는 호출 전에 켜고 finally 에서 끈다. 이미 진행 중인
    행동을 다시 요청하면 무시하고 False 를 반환한다.
    """

    def __init__(self, gateway: Optional[GatewayClient] = None):
        self.gateway = gateway or GatewayClient()

        # 과목 / 문제 생성
        self.active_domain: Optional[Domain] = None
        self.generating_domain: Optional[Domain] = None
        self.generation_error: Optional[str] = None
        self.question: Optional[Question] = None
        self._question_epoch = 0

        # 힌트
        self.hint: Optional[str] = None
        self.hint_error: Optional[str] = None
        self.is_hint_loading = False

        # 답안 / 채점
        self.user_answer = ""
        self.evaluation: Optional[Evaluation] = None
        self.is_checking = False
        self.show_answer = False

        # 채팅
        self.chat_messages: List[ChatMessage] = [ChatMessage(ASSISTANT, CHAT_GREETING)]
        self.is_chat_loading = False
        self.is_chat_visible = False

    # === 과목 / 문제 ===

    def _replace_question(self, question: Optional[Question]):
        """문제 교체 시 힌트, 답안, 채점, 정답 보기 상태를 초기화"""
        self.question = question
        self.hint = None
        self.hint_error = None
        self.user_answer = ""
        self.evaluation = None
        self.show_answer = False

    def select_domain(self, domain: Union[Domain, str]):
        domain = _to_domain(domain)
        self.active_domain = domain
        self._question_epoch += 1
        self._replace_question(None)
        self.generation_error = None
        logger.info(f"과목 선택: {domain.label}")

    @property
    def is_generating(self) -> bool:
        return self.generating_domain is not None

    async def generate_question(self, domain: Union[Domain, str]) -> bool:
        domain = _to_domain(domain)
        if self.is_generating:
            logger.info(f"문제 생성 중이므로 요청 무시: {domain.label}")
            return False

        self.generating_domain = domain
        self.generation_error = None
        self.active_domain = domain
        self._question_epoch += 1
        epoch = self._question_epoch
        self._replace_question(None)

        try:
            result = await self.gateway.request_structured(build_question_prompt(domain), Question)
            if self._is_stale_generation(domain, epoch):
                logger.warning(f"오래된 문제 생성 결과 폐기: {domain.label}")
            else:
                self._replace_question(result.value)
                logger.info(f"✅ 문제 생성 완료: {domain.label}")
        except Exception as e:
            logger.error(f"문제 생성 오류 ({domain.label}): {e}")
            if not self._is_stale_generation(domain, epoch):
                self.generation_error = GENERATION_FAILED_TEMPLATE.format(domain=domain.label)
        finally:
            self.generating_domain = None
        return True

    def _is_stale_generation(self, domain: Domain, epoch: int) -> bool:
        return self.active_domain is not domain or self._question_epoch != epoch

    # === 힌트 ===

    async def request_hint(self) -> bool:
        question = self.question
        if question is None or self.is_hint_loading:
            return False

        self.is_hint_loading = True
        self.hint = None
        self.hint_error = None
        try:
            prompt = build_hint_prompt(self.active_domain, question.question)
            result = await self.gateway.request_text(prompt)
            if self.question is question:
                self.hint = result.text
        except Exception as e:
            logger.error(f"힌트 생성 오류: {e}")
            if self.question is question:
                self.hint_error = HINT_FAILED_MESSAGE
        finally:
            self.is_hint_loading = False
        return True

    # === 답안 / 채점 ===

    def set_answer(self, answer: str):
        self.user_answer = answer or ""
        self.evaluation = None

    def toggle_answer_reveal(self) -> bool:
        if self.question is None:
            return False
        self.show_answer = not self.show_answer
        return True

    async def evaluate_answer(self, question: Question, user_answer: str) -> Evaluation:
        """채점 - 어떤 실패든 '채점 실패' 평가로 대체"""
        try:
            prompt = build_grading_prompt(question.question, question.answer, user_answer)
            result = await self.gateway.request_structured(prompt, Evaluation)
            return result.value
        except Exception as e:
            logger.error(f"채점 오류: {e}")
            return Evaluation.fallback()

    async def submit_answer(self, answer: Optional[str] = None) -> bool:
        if self.is_checking:
            return False
        if answer is not None:
            self.set_answer(answer)

        question = self.question
        user_answer = self.user_answer
        if question is None or not user_answer.strip():
            return False

        self.is_checking = True
        self.evaluation = None
        try:
            evaluation = await self.evaluate_answer(question, user_answer)
            if self.question is question:
                self.evaluation = evaluation
        finally:
            self.is_checking = False
        return True

    # === 채팅 ===

    def open_chat(self):
        self.is_chat_visible = True

    def close_chat(self):
        self.is_chat_visible = False

    def toggle_chat(self):
        self.is_chat_visible = not self.is_chat_visible

    async def send_chat(self, message: str) -> bool:
        if not message or not message.strip() or self.is_chat_loading:
            return False

        self.chat_messages.append(ChatMessage(USER, message))
        self.is_chat_loading = True
        reply = CHAT_FAILED_MESSAGE
        try:
            question = self.question
            prompt = build_chat_prompt(
                message,
                question_type=question.type if question else None,
                question_text=question.question if question else None,
            )
            result = await self.gateway.request_text(prompt)
            reply = result.text
        except Exception as e:
            logger.error(f"채팅 응답 오류: {e}")
        finally:
            self.chat_messages.append(ChatMessage(ASSISTANT, reply))
            self.is_chat_loading = False
        return True

    # === 화면 ===

    def snapshot(self) -> Dict[str, Any]:
        """현재 상태를 화면 렌더링용 딕셔너리로 변환"""
        return {
            "domains": [
                {
                    "label": domain.label,
                    "name": domain.english_name,
                    "theme": domain.theme,
                    "is_active": self.active_domain is domain,
                    "is_generating": self.generating_domain is domain,
                }
                for domain in all_domains()
            ],
            "active_domain": self.active_domain.label if self.active_domain else None,
            "is_generating": self.is_generating,
            "generation_error": self.generation_error,
            "question": self._question_view(),
            "chat": {
                "visible": self.is_chat_visible,
                "loading": self.is_chat_loading,
                "messages": [asdict(m) for m in self.chat_messages],
            },
        }

    def _question_view(self) -> Optional[Dict[str, Any]]:
        question = self.question
        if question is None:
            return None

        parsed = parse_options(question.question)
        passage = question.passage or ""
        return {
            "type_label": question.type or (self.active_domain.label if self.active_domain else ""),
            "passage": passage if len(passage) > MIN_PASSAGE_LENGTH else None,
            "prompt_text": parsed.prompt_text,
            "options": [asdict(o) for o in parsed.options] if parsed.options else None,
            "answer": question.answer if self.show_answer else None,
            "show_answer": self.show_answer,
            "user_answer": self.user_answer,
            "is_checking": self.is_checking,
            "can_submit": bool(self.user_answer.strip()) and not self.is_checking,
            "evaluation": self.evaluation.model_dump() if self.evaluation else None,
            "hint": self.hint,
            "hint_error": self.hint_error,
            "is_hint_loading": self.is_hint_loading,
        }


# 전역 인스턴스 (단일 사용자 세션)
tutor_session = TutorSession()
