# services/question_parser.py
# 문제 본문에서 "(A) ... (B) ..." 형식의 객관식 보기를 추출

import re
from dataclasses import dataclass
from typing import List, Optional

OPTION_PATTERN = re.compile(r"\(([A-D])\)\s*([^()\n]+)")


@dataclass(frozen=True)
class Option:
    label: str
    text: str


@dataclass(frozen=True)
class ParsedQuestion:
    prompt_text: str
    options: Optional[List[Option]] = None

    @property
    def is_multiple_choice(self) -> bool:
        return self.options is not None


def parse_options(text: str) -> ParsedQuestion:
    """보기가 2개 이상이면 객관식으로, 아니면 전체를 질문으로 본다"""
    text = text or ""
    options: List[Option] = []
    seen = set()
    first_index = None

    for match in OPTION_PATTERN.finditer(text):
        label = match.group(1)
        if label in seen:
            continue
        if first_index is None:
            first_index = match.start()
        seen.add(label)
        options.append(Option(label=label, text=match.group(2).strip()))

    if len(options) >= 2:
        return ParsedQuestion(prompt_text=text[:first_index].strip(), options=options)
    return ParsedQuestion(prompt_text=text, options=None)
