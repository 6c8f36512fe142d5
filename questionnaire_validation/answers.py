"""
Answer values and response sets.

A response set maps category id -> question id -> raw answer value. Raw
values are converted into an explicit `Answer` variant at lookup time so
that validators branch on `Answer.kind` instead of inspecting Python types.
"""

import math
from typing import Any, Iterator, Mapping, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

from .base import (
    QuestionKind,
    SINGLE_CHOICE_KINDS,
    is_empty,
    format_number,
)
from .schema import QuestionSchema


class AnswerKind(str, Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    OPTION = "option"
    OPTIONS = "options"


@dataclass(frozen=True)
class Answer:
    """
    Tagged answer value.

    - EMPTY: absent key, None, NaN, "" or []
    - TEXT: free text (str)
    - NUMBER: int or float
    - OPTION: a scalar submitted to a single-choice question (str)
    - OPTIONS: a list of submitted options (tuple of str)
    """
    kind: AnswerKind
    value: Any = None

    @property
    def is_empty(self) -> bool:
        return self.kind == AnswerKind.EMPTY

    @classmethod
    def from_raw(cls, raw: Any, question_kind: Optional[QuestionKind] = None) -> "Answer":
        """Convert a raw response value, using the question kind when known."""
        if is_empty(raw):
            return cls(AnswerKind.EMPTY)
        if isinstance(raw, (list, tuple)):
            return cls(AnswerKind.OPTIONS, tuple(_scalar_text(v) for v in raw))
        if question_kind in SINGLE_CHOICE_KINDS:
            return cls(AnswerKind.OPTION, _scalar_text(raw))
        if isinstance(raw, bool):
            return cls(AnswerKind.TEXT, _scalar_text(raw))
        if isinstance(raw, (int, float)):
            return cls(AnswerKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(AnswerKind.TEXT, raw)
        return cls(AnswerKind.TEXT, str(raw))

    def as_text(self) -> str:
        """The scalar form compared against declared options."""
        if self.kind == AnswerKind.NUMBER:
            return format_number(self.value)
        if self.kind == AnswerKind.OPTIONS:
            return ",".join(self.value)
        if self.kind == AnswerKind.EMPTY:
            return ""
        return str(self.value)

    def as_number(self) -> Optional[float]:
        """The numeric value, or None when the answer is not a number."""
        if self.kind == AnswerKind.NUMBER:
            # ints past float range are still numbers
            if isinstance(self.value, int):
                return self.value
            return float(self.value)
        if self.kind in (AnswerKind.TEXT, AnswerKind.OPTION):
            try:
                number = float(str(self.value).strip())
            except ValueError:
                return None
            return None if math.isnan(number) else number
        return None


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


EMPTY_ANSWER = Answer(AnswerKind.EMPTY)


class ResponseSet:
    """
    Read-only view over a caller-owned response mapping.

    The wrapped mapping is never modified. A category entry that is not a
    mapping is treated as holding no answers.
    """

    def __init__(self, raw: Optional[Mapping[str, Any]] = None):
        self._raw: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._raw

    def category_ids(self) -> Iterator[str]:
        return iter(self._raw.keys())

    def category(self, category_id: Optional[str]) -> Mapping[str, Any]:
        """Answers for one category; empty when absent or malformed."""
        value = self._raw.get(category_id) if category_id is not None else None
        return value if isinstance(value, Mapping) else {}

    def raw_category(self, category_id: str) -> Any:
        return self._raw.get(category_id)

    def answer(self, category_id: Optional[str], question: QuestionSchema) -> Answer:
        if question.id is None:
            return EMPTY_ANSWER
        raw = self.category(category_id).get(question.id)
        return Answer.from_raw(raw, question.question_kind)

    def is_answered(self, category_id: Optional[str], question: QuestionSchema) -> bool:
        return not self.answer(category_id, question).is_empty

    def count_answered(self, category_id: Optional[str], questions) -> Tuple[int, int]:
        """(answered, total) over the given questions."""
        questions = list(questions)
        answered = sum(1 for q in questions if self.is_answered(category_id, q))
        return answered, len(questions)


__all__ = [
    "AnswerKind",
    "Answer",
    "EMPTY_ANSWER",
    "ResponseSet",
]
