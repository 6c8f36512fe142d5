"""
Structure validation for questionnaire schemas.

Checks the schema's own consistency, with no response data involved:
- Version and assessment kind
- Category list presence and expected size per assessment kind
- Category ids, titles, subcategory lists, declared question totals
- Question ids, display numbers, text, kinds, options, back-references

The walk never short-circuits: every problem in the tree is reported, in
document order.
"""

from typing import Any, Dict, Optional, Set

from .base import (
    ErrorCode,
    CompletionStatus,
    IssueLog,
    ValidationResult,
    VALID_QUESTION_KINDS,
    VALID_ASSESSMENT_KINDS,
    EXPECTED_CATEGORY_COUNTS,
)
from .schema import (
    QuestionnaireSchema,
    CategorySchema,
    SubcategorySchema,
    QuestionSchema,
)


# ============================================================================
# STRUCTURE VALIDATOR CLASS
# ============================================================================

class StructureValidator:
    """
    Validates one questionnaire schema.

    The instance keeps the id / number sets seen so far so that duplicates
    are detected across the entire schema, not just within a category.
    """

    def __init__(self, schema: Any):
        """
        Initialize validator with a schema.

        Args:
            schema: QuestionnaireSchema or a raw schema document (mapping)
        """
        self.schema: Optional[QuestionnaireSchema] = (
            QuestionnaireSchema.from_dict(schema) if schema is not None else None
        )
        self.log = IssueLog()

        self.category_ids: Set[str] = set()
        self.question_ids: Set[str] = set()
        self.question_numbers: Set[str] = set()

    def validate(self) -> ValidationResult:
        """Run all structure checks."""
        if self.schema is None:
            self.log.error(
                ErrorCode.MISSING_QUESTIONNAIRE,
                "No questionnaire structure provided for validation",
            )
            return self.log.build(CompletionStatus.empty())

        self._validate_basic_structure()

        for index, category in enumerate(self.schema.category_list):
            self._validate_category(category, index)

        # Only the required-question total is meaningful without responses
        completion = CompletionStatus.empty(
            total_required_questions=self.schema.total_required_questions()
        )
        return self.log.build(completion)

    def _validate_basic_structure(self):
        """Version, assessment kind and category list."""
        schema = self.schema

        if not schema.version:
            self.log.error(
                ErrorCode.MISSING_VERSION,
                "Questionnaire version is required",
                field="version",
            )

        kind = schema.kind
        if kind is None:
            self.log.error(
                ErrorCode.INVALID_TYPE,
                f"Questionnaire type must be one of {', '.join(VALID_ASSESSMENT_KINDS)}, "
                f"got {schema.assessment_kind!r}",
                field="assessmentType",
            )

        if schema.categories is None:
            self.log.error(
                ErrorCode.MISSING_CATEGORIES,
                "Categories array is required",
                field="categories",
            )
            return

        if len(schema.categories) == 0:
            self.log.error(
                ErrorCode.EMPTY_CATEGORIES,
                "At least one category is required",
                field="categories",
            )

        if kind is not None:
            expected = EXPECTED_CATEGORY_COUNTS[kind]
            if len(schema.categories) != expected:
                self.log.warning(
                    ErrorCode.UNEXPECTED_CATEGORY_COUNT,
                    f"Expected {expected} categories for {kind.value} assessment, "
                    f"found {len(schema.categories)}",
                    field="categories",
                )

    def _validate_category(self, category: CategorySchema, index: int):
        """Category fields, then its subcategories and questions."""
        context = f"categories[{index}]"

        if not category.id:
            self.log.error(
                ErrorCode.MISSING_CATEGORY_ID,
                "Category ID is required",
                field=f"{context}.id",
            )
        else:
            if category.id in self.category_ids:
                self.log.error(
                    ErrorCode.DUPLICATE_CATEGORY_ID,
                    f"Duplicate category ID: {category.id}",
                    field=f"{context}.id",
                    category=category.id,
                )
            self.category_ids.add(category.id)

        if not category.title:
            self.log.error(
                ErrorCode.MISSING_CATEGORY_TITLE,
                "Category title is required",
                field=f"{context}.title",
                category=category.id,
            )

        if category.subcategories is None:
            self.log.error(
                ErrorCode.MISSING_SUBCATEGORIES,
                "Subcategories array is required",
                field=f"{context}.subcategories",
                category=category.id,
            )
        else:
            if len(category.subcategories) == 0:
                self.log.warning(
                    ErrorCode.EMPTY_SUBCATEGORIES,
                    "Category has no subcategories",
                    field=f"{context}.subcategories",
                    category=category.id,
                )

            actual = category.actual_question_count
            if category.total_questions != actual:
                self.log.error(
                    ErrorCode.QUESTION_COUNT_MISMATCH,
                    f"Category totalQuestions ({category.total_questions}) "
                    f"doesn't match actual count ({actual})",
                    field=f"{context}.totalQuestions",
                    category=category.id,
                )

        for sub_index, subcategory in enumerate(category.subcategory_list):
            self._validate_subcategory(category, subcategory, f"{context}.subcategories[{sub_index}]")

    def _validate_subcategory(self, category: CategorySchema, subcategory: SubcategorySchema, context: str):
        if not subcategory.id:
            self.log.error(
                ErrorCode.MISSING_SUBCATEGORY_ID,
                "Subcategory ID is required",
                field=f"{context}.id",
                category=category.id,
            )

        actual = len(subcategory.question_list)
        if subcategory.question_count is not None and subcategory.question_count != actual:
            self.log.error(
                ErrorCode.SUBCATEGORY_QUESTION_COUNT_MISMATCH,
                f"Subcategory questionCount ({subcategory.question_count}) "
                f"doesn't match actual count ({actual})",
                field=f"{context}.questionCount",
                category=category.id,
            )

        for q_index, question in enumerate(subcategory.question_list):
            self._validate_question(
                category, subcategory, question,
                f"{category.id}.{subcategory.id}.questions[{q_index}]",
            )

    def _validate_question(
        self,
        category: CategorySchema,
        subcategory: SubcategorySchema,
        question: QuestionSchema,
        context: str,
    ):
        """Per-question field, uniqueness and back-reference checks."""
        ids: Dict[str, Optional[str]] = {"category": category.id, "question": question.id}

        if not question.id:
            self.log.error(
                ErrorCode.MISSING_QUESTION_ID,
                "Question ID is required",
                field=f"{context}.id",
                category=category.id,
            )
        else:
            if question.id in self.question_ids:
                self.log.error(
                    ErrorCode.DUPLICATE_QUESTION_ID,
                    f"Duplicate question ID: {question.id}",
                    field=f"{context}.id",
                    **ids,
                )
            self.question_ids.add(question.id)

        if not question.number:
            self.log.error(
                ErrorCode.MISSING_QUESTION_NUMBER,
                "Question number is required",
                field=f"{context}.number",
                **ids,
            )
        else:
            if question.number in self.question_numbers:
                self.log.error(
                    ErrorCode.DUPLICATE_QUESTION_NUMBER,
                    f"Duplicate question number: {question.number}",
                    field=f"{context}.number",
                    **ids,
                )
            self.question_numbers.add(question.number)

        if not question.text:
            self.log.error(
                ErrorCode.MISSING_QUESTION_TEXT,
                "Question text is required",
                field=f"{context}.text",
                **ids,
            )

        if question.question_kind is None:
            self.log.error(
                ErrorCode.INVALID_QUESTION_TYPE,
                f"Invalid question type: {question.kind} "
                f"(expected one of {', '.join(VALID_QUESTION_KINDS)})",
                field=f"{context}.type",
                **ids,
            )

        if question.is_choice and not question.options:
            self.log.error(
                ErrorCode.MISSING_OPTIONS,
                f"Question type {question.kind} requires options",
                field=f"{context}.options",
                **ids,
            )

        if question.category != category.id:
            self.log.error(
                ErrorCode.CATEGORY_REFERENCE_MISMATCH,
                f"Question category reference ({question.category}) "
                f"doesn't match parent category ({category.id})",
                field=f"{context}.category",
                **ids,
            )

        if question.subcategory != subcategory.id:
            self.log.error(
                ErrorCode.SUBCATEGORY_REFERENCE_MISMATCH,
                f"Question subcategory reference ({question.subcategory}) "
                f"doesn't match parent subcategory ({subcategory.id})",
                field=f"{context}.subcategory",
                **ids,
            )


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def validate_structure(schema: Any) -> ValidationResult:
    """
    Validate a questionnaire schema's internal consistency.

    Args:
        schema: QuestionnaireSchema or raw schema document

    Returns:
        ValidationResult whose completion status only carries the
        required-question total
    """
    validator = StructureValidator(schema)
    return validator.validate()


def validate_structure_dict(schema: Any) -> Dict[str, Any]:
    """Validate a schema and return the result as a JSON-ready dictionary."""
    return validate_structure(schema).to_dict()


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    "StructureValidator",
    "validate_structure",
    "validate_structure_dict",
]
