# services/prompt_builder.py
# 행동(문제 생성, 힌트, 채점, 채팅)별 프롬프트 생성

from typing import Optional

from smart_tutor.services.domains import Domain, all_domains


def build_question_prompt(domain: Domain) -> str:
    """새 문제 생성 프롬프트 (JSON 응답)"""
    guidance_lines = "\n".join(
        f"            - For '{d.label}' ({d.english_name}), {d.guidance}" for d in all_domains()
    )
    return f"""Create a new, high-quality 11+ exam style question for an 11-year-old student. The subject is "{domain.label}". The question must be in English.
{guidance_lines}

            Provide a detailed answer and explanation in Korean.

            Return the response ONLY in the following JSON format:
            {{"type": "Generated {domain.label} Question", "passage": "...", "question": "...", "answer": "..."}}
            Ensure the 'passage' key is included, but its value can be an empty string if not needed."""


def build_hint_prompt(domain: Optional[Domain], question_text: str) -> str:
    """힌트 프롬프트 (정답 노출 금지, 한국어 한 문장)"""
    subject = domain.label if domain else "11+"
    return (
        f"You are a helpful 11+ tutor. Provide a single, simple hint for the following {subject} question, "
        "but do not give away the answer. The hint should be a clue to guide an 11-year-old student. "
        "Keep it to one sentence in Korean.\n\n"
        f'Question: "{question_text}"'
    )


def build_grading_prompt(question_text: str, correct_answer: str, user_answer: str) -> str:
    """채점 프롬프트 (JSON 응답)"""
    return (
        "You are grading an 11+ practice question.\n"
        f'Question: "{question_text}"\n'
        f'Correct answer: "{correct_answer}"\n'
        f'Student answer: "{user_answer}"\n'
        'Respond in Korean as JSON {"isCorrect":true|false,"feedback":"short feedback"}'
    )


TUTOR_PERSONA = (
    "You are a friendly and encouraging 11+ tutor AI. "
    "Your answers must be in Korean and easy for an 11-year-old to understand."
)


def build_chat_prompt(user_message: str, question_type: Optional[str] = None, question_text: Optional[str] = None) -> str:
    """채팅 프롬프트 - 현재 문제가 있으면 문맥으로 포함"""
    prompt = TUTOR_PERSONA
    if question_text:
        prompt += (
            "\n\nThe student is currently looking at this question:\n"
            f"Type: {question_type or ''}\n"
            f'Question: "{question_text}"\n\n'
            f'Considering this context, answer the student\'s following query concisely: "{user_message}"'
        )
    else:
        prompt += f'\n\nAnswer the student\'s following query concisely: "{user_message}"'
    return prompt
