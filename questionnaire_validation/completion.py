"""
Completion metrics over required questions.

Completion of a category is the share of its required questions that have
non-empty answers (100 when it has none). Overall completion is the global
ratio answered-required / total-required across all categories, not an
average of the per-category figures.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass
import pandas as pd

from .base import (
    ErrorCode,
    CompletionStatus,
    IssueLog,
    ValidationResult,
    MISSING_SAMPLE_SIZE,
    format_percentage,
)
from .schema import QuestionnaireSchema
from .answers import ResponseSet


def _ratio(answered: int, total: int) -> float:
    return (answered / total) * 100 if total > 0 else 100.0


def _as_response_set(responses: Any) -> ResponseSet:
    return responses if isinstance(responses, ResponseSet) else ResponseSet(responses)


# ============================================================================
# COMPLETION CALCULATION
# ============================================================================

def compute_completion(responses: Any, schema: Any) -> CompletionStatus:
    """
    Compute per-category and overall completion. Pure and deterministic.

    Args:
        responses: Response mapping (category id -> question id -> value)
        schema: QuestionnaireSchema or raw schema document

    Returns:
        CompletionStatus with fractions in the 0-100 range
    """
    schema = QuestionnaireSchema.from_dict(schema)
    response_set = _as_response_set(responses)

    category_completions: Dict[str, float] = {}
    total_answered = 0
    total_required = 0

    for category in schema.category_list:
        answered, required = response_set.count_answered(category.id, category.required_questions())
        if category.id is not None:
            category_completions[category.id] = _ratio(answered, required)
        total_answered += answered
        total_required += required

    return CompletionStatus(
        overall_completion=_ratio(total_answered, total_required),
        category_completions=category_completions,
        required_questions_answered=total_answered,
        total_required_questions=total_required,
    )


def validate_completion(responses: Any, schema: Any) -> ValidationResult:
    """
    Validate submission readiness.

    Unlike response validation, missing required answers are blocking here:
    one INCOMPLETE_REQUIRED_QUESTIONS error lists a sample of what is
    missing, plus one INCOMPLETE_CATEGORY warning per unfinished category.
    """
    schema = QuestionnaireSchema.from_dict(schema)
    response_set = _as_response_set(responses)
    log = IssueLog()

    missing: List[str] = []
    for category, question in schema.iter_questions():
        if question.required and not response_set.is_answered(category.id, question):
            missing.append(question.label)

    if missing:
        sample = ", ".join(missing[:MISSING_SAMPLE_SIZE])
        more = "..." if len(missing) > MISSING_SAMPLE_SIZE else ""
        log.error(
            ErrorCode.INCOMPLETE_REQUIRED_QUESTIONS,
            f"{len(missing)} required questions not answered: {sample}{more}",
        )

    for category in schema.category_list:
        answered, required = response_set.count_answered(category.id, category.required_questions())
        completion = _ratio(answered, required)
        if completion < 100:
            log.warning(
                ErrorCode.INCOMPLETE_CATEGORY,
                f'Category "{category.title}" is {format_percentage(completion)} complete '
                f"({answered}/{required} required questions answered)",
                category=category.id,
            )

    status = compute_completion(response_set, schema)
    if status.overall_completion < 100:
        log.warning(
            ErrorCode.INCOMPLETE_ASSESSMENT,
            f"Assessment is {format_percentage(status.overall_completion)} complete. "
            f"All required questions must be answered for submission.",
        )

    return log.build(status, is_valid=not log.has_errors and status.overall_completion == 100)


# ============================================================================
# DISPLAY PROGRESS (UI ONLY)
# ============================================================================

@dataclass(frozen=True)
class CategoryProgress:
    """Display-only progress counters for one category."""
    category_id: Optional[str]
    title: Optional[str]
    required_answered: int
    required_total: int
    answered_questions: int
    total_questions: int

    @property
    def completion(self) -> float:
        return _ratio(self.required_answered, self.required_total)

    @property
    def progress(self) -> float:
        return _ratio(self.answered_questions, self.total_questions)

    @property
    def status(self) -> str:
        if self.completion >= 100:
            return "completed"
        if self.answered_questions > 0:
            return "partial"
        return "not_started"


def compute_progress(responses: Any, schema: Any) -> List[CategoryProgress]:
    """
    Per-category counters over all questions, required or not.

    The answered-to-total ratio (`progress`) is a display convenience; the
    authoritative figure is `completion`, which only counts required
    questions.
    """
    schema = QuestionnaireSchema.from_dict(schema)
    response_set = _as_response_set(responses)

    rows = []
    for category in schema.category_list:
        required_answered, required_total = response_set.count_answered(
            category.id, category.required_questions()
        )
        answered, total = response_set.count_answered(category.id, category.iter_questions())
        rows.append(CategoryProgress(
            category_id=category.id,
            title=category.title,
            required_answered=required_answered,
            required_total=required_total,
            answered_questions=answered,
            total_questions=total,
        ))
    return rows


PROGRESS_COLUMNS = [
    "categoryId", "title", "requiredAnswered", "requiredTotal", "completion",
    "answeredQuestions", "totalQuestions", "progress", "status",
]


def completion_table(responses: Any, schema: Any) -> pd.DataFrame:
    """Progress counters as a DataFrame, one row per category, in schema order."""
    rows = [
        {
            "categoryId": p.category_id,
            "title": p.title,
            "requiredAnswered": p.required_answered,
            "requiredTotal": p.required_total,
            "completion": p.completion,
            "answeredQuestions": p.answered_questions,
            "totalQuestions": p.total_questions,
            "progress": p.progress,
            "status": p.status,
        }
        for p in compute_progress(responses, schema)
    ]
    return pd.DataFrame(rows, columns=PROGRESS_COLUMNS)


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    "compute_completion",
    "validate_completion",
    "CategoryProgress",
    "compute_progress",
    "completion_table",
    "PROGRESS_COLUMNS",
]
