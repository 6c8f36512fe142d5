"""
Questionnaire schema model: categories -> subcategories -> questions.

Schema documents arrive as camelCase JSON mappings from a schema provider.
Parsing is tolerant: a missing or wrongly-typed field becomes None (or an
absent list) so that the structure validator can report it, rather than the
parser raising on the first problem.
"""

from typing import Dict, List, Any, Iterator, Mapping, Optional, Tuple
from dataclasses import dataclass, field, replace

from .base import (
    QuestionKind,
    AssessmentKind,
    CHOICE_KINDS,
    get_str_value,
    get_int_value,
    convert_string_to_bool,
)


def _parse_options(raw: Any) -> Optional[List[str]]:
    """Options list as strings, or None when absent / not a list."""
    if not isinstance(raw, (list, tuple)):
        return None
    return [str(option) for option in raw]


def _as_list(raw: Any) -> Optional[list]:
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return None


@dataclass(frozen=True)
class QuestionSchema:
    """A single question. `kind` keeps the raw document value."""
    id: Optional[str] = None
    number: Optional[str] = None
    text: Optional[str] = None
    kind: Optional[str] = None
    required: bool = False
    options: Optional[Tuple[str, ...]] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None

    @property
    def question_kind(self) -> Optional[QuestionKind]:
        """The parsed kind, or None when the document value is unknown."""
        try:
            return QuestionKind(self.kind)
        except ValueError:
            return None

    @property
    def is_choice(self) -> bool:
        return self.question_kind in CHOICE_KINDS

    @property
    def label(self) -> str:
        """Human label used in messages: "<number> - <text>"."""
        return f"{self.number} - {self.text}"

    @classmethod
    def from_dict(cls, raw: Any) -> "QuestionSchema":
        if not isinstance(raw, Mapping):
            return cls()
        kind = raw.get("type")
        options = _parse_options(raw.get("options"))
        return cls(
            id=get_str_value(raw, "id"),
            number=get_str_value(raw, "number"),
            text=get_str_value(raw, "text"),
            kind=kind if isinstance(kind, str) else None,
            required=convert_string_to_bool(raw.get("required")),
            options=tuple(options) if options is not None else None,
            category=get_str_value(raw, "category"),
            subcategory=get_str_value(raw, "subcategory"),
            description=get_str_value(raw, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "number": self.number,
            "text": self.text,
            "description": self.description,
            "type": self.kind,
            "required": self.required,
            "options": list(self.options) if self.options is not None else None,
            "category": self.category,
            "subcategory": self.subcategory,
        }
        return {k: v for k, v in result.items() if v is not None}


@dataclass(frozen=True)
class SubcategorySchema:
    """Ordered list of questions. `questions` is None when the document has no list."""
    id: Optional[str] = None
    title: Optional[str] = None
    questions: Optional[Tuple[QuestionSchema, ...]] = ()
    question_count: Optional[int] = None

    @property
    def question_list(self) -> Tuple[QuestionSchema, ...]:
        return self.questions or ()

    @classmethod
    def from_dict(cls, raw: Any) -> "SubcategorySchema":
        if not isinstance(raw, Mapping):
            return cls(questions=None)
        questions = _as_list(raw.get("questions"))
        return cls(
            id=get_str_value(raw, "id"),
            title=get_str_value(raw, "title"),
            questions=tuple(QuestionSchema.from_dict(q) for q in questions) if questions is not None else None,
            question_count=get_int_value(raw, "questionCount"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions] if self.questions is not None else None,
            "questionCount": self.question_count,
        }
        return {k: v for k, v in result.items() if v is not None}


@dataclass(frozen=True)
class CategorySchema:
    """A category and its subcategories. `subcategories` is None when absent."""
    id: Optional[str] = None
    title: Optional[str] = None
    subcategories: Optional[Tuple[SubcategorySchema, ...]] = ()
    total_questions: Optional[int] = None
    description: Optional[str] = None

    @property
    def subcategory_list(self) -> Tuple[SubcategorySchema, ...]:
        return self.subcategories or ()

    def iter_questions(self) -> Iterator[QuestionSchema]:
        for subcategory in self.subcategory_list:
            yield from subcategory.question_list

    @property
    def actual_question_count(self) -> int:
        return sum(len(sub.question_list) for sub in self.subcategory_list)

    def required_questions(self) -> List[QuestionSchema]:
        return [q for q in self.iter_questions() if q.required]

    def find_question(self, question_id: str) -> Optional[QuestionSchema]:
        for question in self.iter_questions():
            if question.id == question_id:
                return question
        return None

    @classmethod
    def from_dict(cls, raw: Any) -> "CategorySchema":
        if not isinstance(raw, Mapping):
            return cls(subcategories=None)
        subcategories = _as_list(raw.get("subcategories"))
        return cls(
            id=get_str_value(raw, "id"),
            title=get_str_value(raw, "title"),
            subcategories=(
                tuple(SubcategorySchema.from_dict(s) for s in subcategories)
                if subcategories is not None else None
            ),
            total_questions=get_int_value(raw, "totalQuestions"),
            description=get_str_value(raw, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "subcategories": (
                [s.to_dict() for s in self.subcategories]
                if self.subcategories is not None else None
            ),
            "totalQuestions": self.total_questions,
        }
        return {k: v for k, v in result.items() if v is not None}


@dataclass(frozen=True)
class QuestionnaireSchema:
    """
    The full questionnaire tree.

    `categories` is None when the document has no category list at all,
    which the structure validator reports separately from an empty list.
    """
    version: Optional[str] = None
    assessment_kind: Optional[str] = None
    categories: Optional[Tuple[CategorySchema, ...]] = field(default=())

    @property
    def category_list(self) -> Tuple[CategorySchema, ...]:
        return self.categories or ()

    @property
    def kind(self) -> Optional[AssessmentKind]:
        try:
            return AssessmentKind(self.assessment_kind)
        except ValueError:
            return None

    def iter_questions(self) -> Iterator[Tuple[CategorySchema, QuestionSchema]]:
        for category in self.category_list:
            for question in category.iter_questions():
                yield category, question

    def get_category(self, category_id: str) -> Optional[CategorySchema]:
        for category in self.category_list:
            if category.id == category_id:
                return category
        return None

    def total_required_questions(self) -> int:
        return sum(len(c.required_questions()) for c in self.category_list)

    def restricted_to(self, category_id: str) -> "QuestionnaireSchema":
        """A copy of this schema holding only the given category."""
        return replace(
            self,
            categories=tuple(c for c in self.category_list if c.id == category_id),
        )

    @classmethod
    def from_dict(cls, raw: Any) -> "QuestionnaireSchema":
        if isinstance(raw, QuestionnaireSchema):
            return raw
        if not isinstance(raw, Mapping):
            return cls(categories=None)
        kind = raw.get("assessmentType", raw.get("type"))
        categories = _as_list(raw.get("categories"))
        return cls(
            version=get_str_value(raw, "version"),
            assessment_kind=kind if isinstance(kind, str) else None,
            categories=(
                tuple(CategorySchema.from_dict(c) for c in categories)
                if categories is not None else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "version": self.version,
            "assessmentType": self.assessment_kind,
            "categories": (
                [c.to_dict() for c in self.categories]
                if self.categories is not None else None
            ),
        }
        return {k: v for k, v in result.items() if v is not None}


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    "QuestionSchema",
    "SubcategorySchema",
    "CategorySchema",
    "QuestionnaireSchema",
]
