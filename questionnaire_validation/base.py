"""
Base validation module with shared constants, data classes, and helper functions.

This module provides the foundation for the questionnaire validation engine:
- QuestionKind / AssessmentKind enums for the closed value sets
- Stable error codes
- Data classes for validation issues, completion metrics and results
- Helper functions for emptiness checks and tolerant value parsing
"""

from types import MappingProxyType
from typing import Dict, List, Any, Mapping, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import pandas as pd


# ============================================================================
# SEVERITIES
# ============================================================================

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

VALID_SEVERITIES = [SEVERITY_ERROR, SEVERITY_WARNING, SEVERITY_INFO]


# ============================================================================
# KINDS
# ============================================================================

class QuestionKind(str, Enum):
    """Question kinds as they appear in questionnaire documents."""
    TEXT = "text"             # short-text
    TEXTAREA = "textarea"     # long-text
    SELECT = "select"         # single-choice
    RADIO = "radio"           # single-choice
    CHECKBOX = "checkbox"     # multi-choice
    NUMBER = "number"         # numeric


class AssessmentKind(str, Enum):
    """Assessment kinds a questionnaire can be built for."""
    EXPLORATORY = "EXPLORATORY"
    MIGRATION = "MIGRATION"


VALID_QUESTION_KINDS = [k.value for k in QuestionKind]
VALID_ASSESSMENT_KINDS = [k.value for k in AssessmentKind]

SINGLE_CHOICE_KINDS = frozenset({QuestionKind.SELECT, QuestionKind.RADIO})
MULTI_CHOICE_KINDS = frozenset({QuestionKind.CHECKBOX})
CHOICE_KINDS = SINGLE_CHOICE_KINDS | MULTI_CHOICE_KINDS

# Expected category count per assessment kind (advisory)
EXPECTED_CATEGORY_COUNTS = {
    AssessmentKind.EXPLORATORY: 5,
    AssessmentKind.MIGRATION: 6,
}

# How many missing required questions are listed in completion messages
MISSING_SAMPLE_SIZE = 3


# ============================================================================
# ERROR CODES
# ============================================================================

class ErrorCode:
    """Stable short identifiers for every issue the engine can report."""

    # Structure
    MISSING_QUESTIONNAIRE = "MISSING_QUESTIONNAIRE"
    MISSING_VERSION = "MISSING_VERSION"
    INVALID_TYPE = "INVALID_TYPE"
    MISSING_CATEGORIES = "MISSING_CATEGORIES"
    EMPTY_CATEGORIES = "EMPTY_CATEGORIES"
    UNEXPECTED_CATEGORY_COUNT = "UNEXPECTED_CATEGORY_COUNT"
    MISSING_CATEGORY_ID = "MISSING_CATEGORY_ID"
    DUPLICATE_CATEGORY_ID = "DUPLICATE_CATEGORY_ID"
    MISSING_CATEGORY_TITLE = "MISSING_CATEGORY_TITLE"
    MISSING_SUBCATEGORIES = "MISSING_SUBCATEGORIES"
    EMPTY_SUBCATEGORIES = "EMPTY_SUBCATEGORIES"
    QUESTION_COUNT_MISMATCH = "QUESTION_COUNT_MISMATCH"
    MISSING_SUBCATEGORY_ID = "MISSING_SUBCATEGORY_ID"
    SUBCATEGORY_QUESTION_COUNT_MISMATCH = "SUBCATEGORY_QUESTION_COUNT_MISMATCH"
    MISSING_QUESTION_ID = "MISSING_QUESTION_ID"
    DUPLICATE_QUESTION_ID = "DUPLICATE_QUESTION_ID"
    MISSING_QUESTION_NUMBER = "MISSING_QUESTION_NUMBER"
    DUPLICATE_QUESTION_NUMBER = "DUPLICATE_QUESTION_NUMBER"
    MISSING_QUESTION_TEXT = "MISSING_QUESTION_TEXT"
    INVALID_QUESTION_TYPE = "INVALID_QUESTION_TYPE"
    MISSING_OPTIONS = "MISSING_OPTIONS"
    CATEGORY_REFERENCE_MISMATCH = "CATEGORY_REFERENCE_MISMATCH"
    SUBCATEGORY_REFERENCE_MISMATCH = "SUBCATEGORY_REFERENCE_MISMATCH"

    # Responses
    UNKNOWN_CATEGORY_RESPONSE = "UNKNOWN_CATEGORY_RESPONSE"
    INVALID_CATEGORY_RESPONSE_FORMAT = "INVALID_CATEGORY_RESPONSE_FORMAT"
    UNKNOWN_QUESTION_RESPONSE = "UNKNOWN_QUESTION_RESPONSE"
    MISSING_REQUIRED_RESPONSE = "MISSING_REQUIRED_RESPONSE"
    INVALID_NUMBER_FORMAT = "INVALID_NUMBER_FORMAT"
    INVALID_OPTION_VALUE = "INVALID_OPTION_VALUE"
    INVALID_MULTI_CHOICE_VALUE = "INVALID_MULTI_CHOICE_VALUE"
    INVALID_MULTI_CHOICE_FORMAT = "INVALID_MULTI_CHOICE_FORMAT"

    # Completion
    INCOMPLETE_REQUIRED_QUESTIONS = "INCOMPLETE_REQUIRED_QUESTIONS"
    INCOMPLETE_CATEGORY = "INCOMPLETE_CATEGORY"
    INCOMPLETE_ASSESSMENT = "INCOMPLETE_ASSESSMENT"

    # Service boundary
    NULL_DATA = "NULL_DATA"
    INVALID_DATA_TYPE = "INVALID_DATA_TYPE"
    INTERNAL_VALIDATION_ERROR = "INTERNAL_VALIDATION_ERROR"
    VALIDATION_CANCELLED = "VALIDATION_CANCELLED"


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class ValidationError:
    """A single validation issue. Only severity "error" blocks validity."""
    code: str
    message: str
    severity: str = SEVERITY_ERROR
    category: Optional[str] = None
    question: Optional[str] = None
    field: Optional[str] = None  # Document path, e.g. "categories[0].id"

    @property
    def is_blocking(self) -> bool:
        return self.severity == SEVERITY_ERROR

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "category": self.category,
            "question": self.question,
            "field": self.field,
        }
        # Remove None values to keep response clean
        return {k: v for k, v in result.items() if v is not None}


@dataclass(frozen=True)
class CompletionStatus:
    """Completion metrics over required questions."""
    overall_completion: float = 0.0
    category_completions: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    required_questions_answered: int = 0
    total_required_questions: int = 0

    def __post_init__(self):
        # Cached results are shared snapshots, so the mapping must be read-only
        if not isinstance(self.category_completions, MappingProxyType):
            object.__setattr__(
                self, "category_completions",
                MappingProxyType(dict(self.category_completions)),
            )

    @classmethod
    def empty(cls, total_required_questions: int = 0) -> "CompletionStatus":
        return cls(total_required_questions=total_required_questions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallCompletion": self.overall_completion,
            "categoryCompletions": dict(self.category_completions),
            "requiredQuestionsAnswered": self.required_questions_answered,
            "totalRequiredQuestions": self.total_required_questions,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Result of any validation operation. Never mutated after construction."""
    is_valid: bool
    errors: Tuple[ValidationError, ...] = ()
    warnings: Tuple[ValidationError, ...] = ()
    completion_status: CompletionStatus = field(default_factory=CompletionStatus)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def codes(self) -> List[str]:
        """All issue codes, errors first, in report order."""
        return [e.code for e in self.errors] + [w.code for w in self.warnings]

    @classmethod
    def failure(
        cls,
        code: str,
        message: str,
        completion_status: Optional[CompletionStatus] = None,
    ) -> "ValidationResult":
        """A well-formed invalid result carrying a single error."""
        return cls(
            is_valid=False,
            errors=(ValidationError(code=code, message=message),),
            warnings=(),
            completion_status=completion_status or CompletionStatus.empty(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "completionStatus": self.completion_status.to_dict(),
        }


class IssueLog:
    """
    Mutable accumulator used while a validator walks a document.

    Errors and warnings are kept in the order they were found; info-level
    issues travel with the warnings since neither blocks validity.
    """

    def __init__(self):
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []

    def add(self, issue: ValidationError):
        if issue.severity == SEVERITY_ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def error(self, code: str, message: str, **context):
        self.add(ValidationError(code=code, message=message, severity=SEVERITY_ERROR, **context))

    def warning(self, code: str, message: str, **context):
        self.add(ValidationError(code=code, message=message, severity=SEVERITY_WARNING, **context))

    def info(self, code: str, message: str, **context):
        self.add(ValidationError(code=code, message=message, severity=SEVERITY_INFO, **context))

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def build(self, completion_status: CompletionStatus, is_valid: Optional[bool] = None) -> ValidationResult:
        """Freeze the collected issues into a ValidationResult."""
        if is_valid is None:
            is_valid = not self.has_errors
        return ValidationResult(
            is_valid=is_valid,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            completion_status=completion_status,
        )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def is_empty(value: Any) -> bool:
    """
    Check if an answer value is empty.

    Empty means: None, a missing value (NaN / NA as produced by pandas),
    an empty string, or an empty list. This is the single definition used
    by every component that counts answers.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return len(value) == 0
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    if isinstance(value, float) and pd.isna(value):
        return True
    if value is pd.NA or value is pd.NaT:
        return True
    return False


def get_str_value(raw: Any, key: str) -> Optional[str]:
    """
    Get a string value from a mapping, tolerating missing keys and odd types.

    Returns None when the key is missing, the mapping is not a mapping, or
    the value is empty/blank. Numbers are converted to their string form.
    """
    if not isinstance(raw, Mapping):
        return None
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value if value.strip() else None
    return None


def get_int_value(raw: Any, key: str) -> Optional[int]:
    """Get an integer value from a mapping; None if missing or not integral."""
    if not isinstance(raw, Mapping):
        return None
    value = raw.get(key)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def convert_string_to_bool(value: Any) -> bool:
    """Convert a document flag to boolean. Accepts True, "true" or "1"."""
    if isinstance(value, bool):
        return value
    elif isinstance(value, str):
        lower_val = value.strip().lower()
        if lower_val == "true" or lower_val == "1":
            return True
        return False
    return False


def format_number(value: float) -> str:
    """Render a number the way it is written in documents ("3", not "3.0")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_percentage(value: float) -> str:
    """Format a completion fraction with one decimal place."""
    return f"{value:.1f}%"


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    # Enums
    "QuestionKind",
    "AssessmentKind",
    "ErrorCode",

    # Data classes
    "ValidationError",
    "CompletionStatus",
    "ValidationResult",
    "IssueLog",

    # Constants
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "SEVERITY_INFO",
    "VALID_SEVERITIES",
    "VALID_QUESTION_KINDS",
    "VALID_ASSESSMENT_KINDS",
    "SINGLE_CHOICE_KINDS",
    "MULTI_CHOICE_KINDS",
    "CHOICE_KINDS",
    "EXPECTED_CATEGORY_COUNTS",
    "MISSING_SAMPLE_SIZE",

    # Helper functions
    "is_empty",
    "get_str_value",
    "get_int_value",
    "convert_string_to_bool",
    "format_number",
    "format_percentage",
]
