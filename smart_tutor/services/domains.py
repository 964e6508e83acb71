# services/domains.py
# 과목(도메인) 정적 설정 - 읽기 전용

from enum import Enum
from typing import Dict, List, Optional


class Domain(Enum):
    """11+ 시험 과목"""

    ENGLISH = "영어"
    MATH = "수학"
    VERBAL = "언어추론"
    NON_VERBAL = "비언어추론"

    @property
    def label(self) -> str:
        return self.value

    @property
    def english_name(self) -> str:
        return DOMAIN_CONFIG[self]["english_name"]

    @property
    def guidance(self) -> str:
        return DOMAIN_CONFIG[self]["guidance"]

    @property
    def theme(self) -> Dict[str, str]:
        return DOMAIN_CONFIG[self]["theme"]

    @classmethod
    def from_label(cls, label: str) -> Optional["Domain"]:
        """표시 이름(또는 enum 이름)으로 과목을 찾는다"""
        for domain in cls:
            if label in (domain.value, domain.name):
                return domain
        return None


DOMAIN_CONFIG = {
    Domain.ENGLISH: {
        "english_name": "English",
        "guidance": "it could be a reading comprehension, grammar, or vocabulary question. Include a passage if necessary.",
        "theme": {"icon": "book-open", "color": "#3b82f6", "bg_color": "#dbeafe"},
    },
    Domain.MATH: {
        "english_name": "Math",
        "guidance": "it should be a word problem testing logic and mathematical skills.",
        "theme": {"icon": "sigma", "color": "#ef4444", "bg_color": "#fee2e2"},
    },
    Domain.VERBAL: {
        "english_name": "Verbal Reasoning",
        "guidance": "it could involve sequences, analogies, or code-breaking.",
        "theme": {"icon": "brain-circuit", "color": "#22c55e", "bg_color": "#dcfce7"},
    },
    Domain.NON_VERBAL: {
        "english_name": "Non-verbal Reasoning",
        "guidance": "describe a visual pattern puzzle.",
        "theme": {"icon": "puzzle", "color": "#a855f7", "bg_color": "#f3e8ff"},
    },
}


def all_domains() -> List[Domain]:
    return list(Domain)
