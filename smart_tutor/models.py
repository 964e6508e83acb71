# smart_tutor/models.py
# 요청/응답 및 튜터 도메인 모델

from typing import Optional

from pydantic import BaseModel, Field, field_validator

GRADING_FAILED_FEEDBACK = "채점에 실패했습니다."


class ChatRequest(BaseModel):
    prompt: Optional[str] = Field(None, description="업스트림에 전달할 프롬프트")
    isJson: Optional[bool] = Field(False, description="JSON 객체 응답 강제 여부")

    class Config:
        json_schema_extra = {
            "example": {
                "prompt": "Give me a hint for: What is 3 + 4?",
                "isJson": False,
            }
        }


class ChatResponse(BaseModel):
    text: str = Field(..., description="업스트림 응답 텍스트 (앞뒤 공백 제거)")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="오류 메시지")


class Question(BaseModel):
    """생성된 문제 - 통째로 교체되며 부분 수정하지 않는다"""

    type: str = Field("", description="문제 유형")
    passage: str = Field("", description="지문 (없으면 빈 문자열)")
    question: str = Field(..., min_length=1, description="문제 본문 (객관식이면 (A)~(D) 보기 포함)")
    answer: str = Field("", description="한국어 정답 및 해설")

    @field_validator("type", "passage", "answer", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "type": "Word Problem",
                "passage": "",
                "question": "Tom has 3 apples and buys 3 more. How many? (A) 5 (B) 6 (C) 7 (D) 8",
                "answer": "(B) 6, 3 + 3 = 6 이기 때문입니다.",
            }
        }


class Evaluation(BaseModel):
    isCorrect: bool = Field(..., description="정답 여부")
    feedback: str = Field("", description="짧은 한국어 피드백")

    @classmethod
    def fallback(cls) -> "Evaluation":
        return cls(isCorrect=False, feedback=GRADING_FAILED_FEEDBACK)
