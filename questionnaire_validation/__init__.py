"""
Questionnaire Validation Engine.

Validates hierarchical questionnaires (categories -> subcategories ->
questions) and the free-form responses collected against them:
- Structure: the schema's own internal consistency
- Responses: reference integrity, answer formats, advisory completeness
- Completion: required-question completion metrics and submission readiness

Usage:
    # Structure only
    from questionnaire_validation import validate_structure
    result = validate_structure(schema_document)

    # Responses while editing
    from questionnaire_validation import validate_responses
    result = validate_responses(responses, schema_document)

    # Submission gate
    from questionnaire_validation import validate_completion
    result = validate_completion(responses, schema_document)

Package Structure:
    - base.py: Constants, error codes, result data classes, helpers
    - schema.py: Questionnaire schema model with tolerant ingestion
    - answers.py: Answer variants and the read-only response set view
    - structure_validator.py: Schema consistency checks
    - response_validator.py: Response checks against a schema
    - completion.py: Completion metrics, completion validation, progress table
"""

# Base module - constants, data classes, helpers
from .base import (
    # Enums
    QuestionKind,
    AssessmentKind,
    ErrorCode,

    # Data classes
    ValidationError,
    CompletionStatus,
    ValidationResult,
    IssueLog,

    # Constants
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    SEVERITY_INFO,
    VALID_QUESTION_KINDS,
    VALID_ASSESSMENT_KINDS,
    CHOICE_KINDS,
    EXPECTED_CATEGORY_COUNTS,

    # Helper functions
    is_empty,
)

# Schema model
from .schema import (
    QuestionSchema,
    SubcategorySchema,
    CategorySchema,
    QuestionnaireSchema,
)

# Answers
from .answers import (
    AnswerKind,
    Answer,
    ResponseSet,
)

# Structure validation
from .structure_validator import (
    StructureValidator,
    validate_structure,
    validate_structure_dict,
)

# Response validation
from .response_validator import (
    ResponseValidator,
    validate_responses,
    validate_responses_dict,
)

# Completion
from .completion import (
    compute_completion,
    validate_completion,
    CategoryProgress,
    compute_progress,
    completion_table,
)


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
    "VALID_QUESTION_KINDS",
    "VALID_ASSESSMENT_KINDS",
    "CHOICE_KINDS",
    "EXPECTED_CATEGORY_COUNTS",

    # Helper functions
    "is_empty",

    # Schema model
    "QuestionSchema",
    "SubcategorySchema",
    "CategorySchema",
    "QuestionnaireSchema",

    # Answers
    "AnswerKind",
    "Answer",
    "ResponseSet",

    # Structure API
    "StructureValidator",
    "validate_structure",
    "validate_structure_dict",

    # Response API
    "ResponseValidator",
    "validate_responses",
    "validate_responses_dict",

    # Completion API
    "compute_completion",
    "validate_completion",
    "CategoryProgress",
    "compute_progress",
    "completion_table",
]
