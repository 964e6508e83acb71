# smart_tutor/view.py
# 튜터 단일 페이지 HTML 렌더링

from html import escape
from typing import Any, Dict, List, Optional

PAGE_TITLE = "11+ ChatGPT 튜터"

STYLE = """
body { font-family: sans-serif; background: #f3f4f6; margin: 0; }
header { background: #fff; padding: 16px; box-shadow: 0 1px 2px rgba(0,0,0,.1); }
main { max-width: 960px; margin: 0 auto; padding: 16px; }
.domains { display: flex; flex-wrap: wrap; gap: 16px; justify-content: center; background: #fff; padding: 16px; border-radius: 12px; }
.domain { display: flex; flex-direction: column; align-items: center; gap: 8px; }
.domain button.select { padding: 12px 24px; border-radius: 8px; border: 1px solid #e5e7eb; background: #fff; font-size: 18px; }
.domain.active button.select { font-weight: bold; outline: 2px solid currentColor; }
.card { background: #fff; padding: 32px; border-radius: 16px; margin-top: 24px; }
.passage { background: #f9fafb; border: 1px solid #e5e7eb; padding: 16px; border-radius: 8px; white-space: pre-wrap; }
.error { color: #ef4444; background: #fee2e2; padding: 16px; border-radius: 8px; text-align: center; }
.correct { color: #16a34a; font-weight: bold; }
.incorrect { color: #dc2626; font-weight: bold; }
.hint { background: #fffbeb; border-left: 4px solid #f59e0b; padding: 16px; margin-top: 24px; }
.answer { background: #f0fdf4; border-left: 4px solid #22c55e; padding: 24px; margin-top: 24px; white-space: pre-wrap; }
.chat-toggle { position: fixed; bottom: 20px; right: 20px; }
.chat-toggle button { padding: 16px; border-radius: 999px; background: #4f46e5; color: #fff; border: none; }
.chat { position: fixed; top: 0; right: 0; height: 100%; width: 384px; background: #fff; display: flex; flex-direction: column; box-shadow: -4px 0 16px rgba(0,0,0,.2); }
.chat .log { flex: 1; overflow-y: auto; padding: 16px; }
.msg { margin: 8px 0; padding: 8px 16px; border-radius: 16px; max-width: 80%; word-break: break-word; }
.msg.assistant { background: #e5e7eb; }
.msg.user { background: #2563eb; color: #fff; margin-left: auto; }
"""


def _e(value: Any) -> str:
    return escape("" if value is None else str(value))


def _post_button(action: str, label: str, disabled: bool = False, fields: Optional[Dict[str, str]] = None,
                 css_class: str = "") -> str:
    hidden = "".join(
        f'<input type="hidden" name="{_e(name)}" value="{_e(value)}">' for name, value in (fields or {}).items()
    )
    attrs = " disabled" if disabled else ""
    class_attr = f' class="{css_class}"' if css_class else ""
    return (
        f'<form method="post" action="{action}">{hidden}'
        f'<button type="submit"{class_attr}{attrs}>{_e(label)}</button></form>'
    )


def render_domains(state: Dict[str, Any]) -> str:
    items = []
    for domain in state["domains"]:
        theme = domain["theme"]
        active = " active" if domain["is_active"] else ""
        generate_label = "생성중..." if domain["is_generating"] else "✨ 새 문제"
        items.append(
            f'<div class="domain{active}" style="color: {_e(theme["color"])}">'
            + _post_button("/tutor/domain", domain["label"], fields={"domain": domain["label"]}, css_class="select")
            + _post_button("/tutor/generate", generate_label, disabled=state["is_generating"],
                           fields={"domain": domain["label"]})
            + "</div>"
        )
    return f'<div class="domains">{"".join(items)}</div>'


def render_welcome() -> str:
    return (
        '<div class="card" style="text-align: center">'
        "<h2>11+ 스마트 튜터에 오신 것을 환영합니다!</h2>"
        "<p>상단의 과목을 선택하거나, '새 문제' 버튼을 눌러 연습을 시작하세요.</p>"
        "</div>"
    )


def render_answer_input(question: Dict[str, Any]) -> str:
    if question["options"]:
        choices = "".join(
            '<label style="display: block">'
            f'<input type="radio" name="answer" value="{_e(opt["label"])}"'
            f'{" checked" if question["user_answer"] == opt["label"] else ""}> '
            f'{_e(opt["label"])}. {_e(opt["text"])}</label>'
            for opt in question["options"]
        )
    else:
        choices = (
            f'<input type="text" name="answer" placeholder="답을 입력하세요" value="{_e(question["user_answer"])}">'
        )
    submit_label = "채점중..." if question["is_checking"] else "답안 제출"
    disabled = " disabled" if question["is_checking"] else ""
    return (
        f'<form method="post" action="/tutor/answer">{choices}'
        f'<button type="submit"{disabled}>{submit_label}</button></form>'
    )


def render_question(question: Dict[str, Any]) -> str:
    parts = [f'<div class="card"><h3>{_e(question["type_label"])}</h3>']
    if question["passage"]:
        parts.append(f'<p class="passage">{_e(question["passage"])}</p>')
    parts.append(f'<p style="font-size: 20px">{_e(question["prompt_text"])}</p>')
    parts.append(render_answer_input(question))

    evaluation = question["evaluation"]
    if evaluation:
        css = "correct" if evaluation["isCorrect"] else "incorrect"
        parts.append(f'<p class="{css}">{_e(evaluation["feedback"])}</p>')

    parts.append('<div style="display: flex; gap: 16px; margin-top: 32px">')
    parts.append(_post_button("/tutor/answer/reveal", "정답 숨기기" if question["show_answer"] else "정답 확인"))
    parts.append(_post_button("/tutor/hint", "✨ 힌트 보기", disabled=question["is_hint_loading"]))
    parts.append("</div>")

    if question["hint_error"]:
        parts.append(f'<p class="incorrect">{_e(question["hint_error"])}</p>')
    if question["hint"]:
        parts.append(f'<div class="hint"><h4>힌트!</h4><p>{_e(question["hint"])}</p></div>')
    if question["answer"] is not None:
        parts.append(f'<div class="answer"><h4>정답 및 해설</h4><p>{_e(question["answer"])}</p></div>')

    parts.append("</div>")
    return "".join(parts)


def render_chat(chat: Dict[str, Any]) -> str:
    toggle = '<div class="chat-toggle">' + _post_button("/tutor/chat/toggle", "💬") + "</div>"
    if not chat["visible"]:
        return toggle

    messages: List[str] = [
        f'<div class="msg {_e(m["sender"])}">{_e(m["text"])}</div>' for m in chat["messages"]
    ]
    if chat["loading"]:
        messages.append('<div class="msg assistant">...</div>')
    disabled = " disabled" if chat["loading"] else ""
    return (
        '<aside class="chat">'
        '<div style="display: flex; justify-content: space-between; padding: 16px">'
        "<h3>AI 튜터</h3>" + _post_button("/tutor/chat/toggle", "✕") + "</div>"
        f'<div class="log">{"".join(messages)}</div>'
        '<form method="post" action="/tutor/chat" style="display: flex; padding: 16px">'
        f'<input type="text" name="message" placeholder="질문을 입력하세요..." style="flex: 1"{disabled}>'
        f'<button type="submit"{disabled}>전송</button></form>'
        "</aside>"
    )


def render_page(state: Dict[str, Any]) -> str:
    """세션 스냅샷으로 전체 페이지를 만든다"""
    body = [render_domains(state), '<div class="content">']
    if state["is_generating"]:
        body.append('<p style="text-align: center">문제를 생성하고 있습니다...</p>')
    else:
        if state["generation_error"]:
            body.append(f'<p class="error">{_e(state["generation_error"])}</p>')
        body.append(render_question(state["question"]) if state["question"] else render_welcome())
    body.append("</div>")

    return (
        "<!DOCTYPE html>"
        '<html lang="ko"><head><meta charset="utf-8">'
        f"<title>{PAGE_TITLE}</title><style>{STYLE}</style></head><body>"
        f"<header><h1>🪄 {PAGE_TITLE}</h1></header>"
        f'<main>{"".join(body)}</main>'
        f'{render_chat(state["chat"])}'
        "</body></html>"
    )
