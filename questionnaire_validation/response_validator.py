"""
Response validation against a questionnaire schema.

Validates:
- Reference integrity (responses for unknown categories / questions)
- Category response shape (must be a mapping)
- Required questions left empty (advisory at this stage)
- Answer format per question kind (blocking)
"""

from typing import Any, Dict, Mapping

from .base import (
    ErrorCode,
    IssueLog,
    ValidationResult,
    QuestionKind,
    SINGLE_CHOICE_KINDS,
    MULTI_CHOICE_KINDS,
)
from .schema import QuestionnaireSchema, CategorySchema, QuestionSchema
from .answers import Answer, AnswerKind, ResponseSet
from .completion import compute_completion


# ============================================================================
# RESPONSE VALIDATOR CLASS
# ============================================================================

class ResponseValidator:
    """Validates a response set against one questionnaire schema."""

    def __init__(self, responses: Any, schema: Any):
        """
        Args:
            responses: Response mapping (category id -> question id -> value)
            schema: QuestionnaireSchema or raw schema document
        """
        self.responses = responses if isinstance(responses, ResponseSet) else ResponseSet(responses)
        self.schema = QuestionnaireSchema.from_dict(schema)
        self.log = IssueLog()

    def validate(self) -> ValidationResult:
        self._validate_references()
        self._validate_required_questions()
        self._validate_formats()

        return self.log.build(compute_completion(self.responses, self.schema))

    def _validate_references(self):
        """Unknown categories / questions are tolerated as stale client state."""
        for category_id in self.responses.category_ids():
            category = self.schema.get_category(category_id)
            if category is None:
                self.log.warning(
                    ErrorCode.UNKNOWN_CATEGORY_RESPONSE,
                    f"Response found for unknown category: {category_id}",
                    category=str(category_id),
                )
                continue

            category_responses = self.responses.raw_category(category_id)
            if not isinstance(category_responses, Mapping):
                self.log.error(
                    ErrorCode.INVALID_CATEGORY_RESPONSE_FORMAT,
                    f"Category responses must be an object, got {type(category_responses).__name__}",
                    category=category_id,
                )
                continue

            for question_id in category_responses.keys():
                if category.find_question(question_id) is None:
                    self.log.warning(
                        ErrorCode.UNKNOWN_QUESTION_RESPONSE,
                        f"Response found for unknown question: {question_id}",
                        category=category_id,
                        question=str(question_id),
                    )

    def _validate_required_questions(self):
        """Missing required answers are warnings here; completion makes them errors."""
        for category, question in self.schema.iter_questions():
            if question.required and not self.responses.is_answered(category.id, question):
                self.log.warning(
                    ErrorCode.MISSING_REQUIRED_RESPONSE,
                    f"Required question not answered: {question.label}",
                    category=category.id,
                    question=question.id,
                )

    def _validate_formats(self):
        for category, question in self.schema.iter_questions():
            answer = self.responses.answer(category.id, question)
            if answer.is_empty:
                continue
            self._validate_answer_format(category, question, answer)

    def _validate_answer_format(self, category: CategorySchema, question: QuestionSchema, answer: Answer):
        """Check one non-empty answer against its question kind."""
        kind = question.question_kind
        ids = {"category": category.id, "question": question.id}

        if kind == QuestionKind.NUMBER:
            if answer.as_number() is None:
                self.log.error(
                    ErrorCode.INVALID_NUMBER_FORMAT,
                    f"Invalid number format for question {question.number}",
                    **ids,
                )

        elif kind in SINGLE_CHOICE_KINDS:
            # Options missing is a structure problem, reported there
            if not question.options:
                return
            if answer.kind == AnswerKind.OPTIONS or answer.as_text() not in question.options:
                self.log.error(
                    ErrorCode.INVALID_OPTION_VALUE,
                    f'Invalid option value "{answer.as_text()}" for question {question.number}',
                    **ids,
                )

        elif kind in MULTI_CHOICE_KINDS:
            if not question.options:
                return
            if answer.kind == AnswerKind.OPTIONS:
                for value in answer.value:
                    if value not in question.options:
                        self.log.error(
                            ErrorCode.INVALID_MULTI_CHOICE_VALUE,
                            f'Invalid multi-choice value "{value}" for question {question.number}',
                            **ids,
                        )
            elif answer.as_text() not in question.options:
                # A lone valid option is tolerated in place of a list
                self.log.error(
                    ErrorCode.INVALID_MULTI_CHOICE_FORMAT,
                    f"Multi-choice response should be a list or a valid option for question {question.number}",
                    **ids,
                )


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def validate_responses(responses: Any, schema: Any) -> ValidationResult:
    """
    Validate a response set against a schema.

    Args:
        responses: Response mapping (category id -> question id -> value)
        schema: QuestionnaireSchema or raw schema document

    Returns:
        ValidationResult with format errors, reference / completeness
        warnings, and the completion status of the response set
    """
    validator = ResponseValidator(responses, schema)
    return validator.validate()


def validate_responses_dict(responses: Any, schema: Any) -> Dict[str, Any]:
    """Validate responses and return the result as a JSON-ready dictionary."""
    return validate_responses(responses, schema).to_dict()


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    "ResponseValidator",
    "validate_responses",
    "validate_responses_dict",
]
