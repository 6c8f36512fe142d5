"""
Validation service: the boundary callers talk to.

Wraps the pure validators with caching, debounced real-time scheduling and
fault containment. Every public operation returns a well-formed
ValidationResult (or ValidationSummary); malformed input and internal
faults are reported as results, never raised.
"""

import copy
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional

from questionnaire_validation import (
    ErrorCode,
    QuestionnaireSchema,
    ResponseSet,
    ValidationResult,
    validate_structure,
    validate_responses,
    validate_completion,
)
from .cache import ValidationCache
from .config import ValidationServiceOptions
from .hashing import responses_fingerprint, schema_fingerprint
from .scheduler import ValidationCancelled, ValidationScheduler

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class AssessmentRecord:
    """The parts of a stored assessment the summary needs."""
    id: Optional[str]
    responses: Any
    assessment_kind: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AssessmentRecord":
        record_id = raw.get("id", raw.get("_id"))
        return cls(
            id=str(record_id) if record_id is not None else None,
            responses=raw.get("responses"),
            assessment_kind=raw.get("assessmentType", raw.get("type")),
        )


@dataclass(frozen=True)
class ValidationSummary:
    """Structure, response and completion results folded into one verdict."""
    questionnaire: ValidationResult
    responses: ValidationResult
    completion: ValidationResult

    def _distinct_results(self):
        # A summary that failed as a whole shares one result; count it once
        results = []
        for result in (self.questionnaire, self.responses, self.completion):
            if not any(result is seen for seen in results):
                results.append(result)
        return results

    @property
    def is_valid(self) -> bool:
        return self.questionnaire.is_valid and self.responses.is_valid and self.completion.is_valid

    @property
    def error_count(self) -> int:
        return sum(r.error_count for r in self._distinct_results())

    @property
    def warning_count(self) -> int:
        return sum(r.warning_count for r in self._distinct_results())

    @property
    def completion_percentage(self) -> float:
        return self.completion.completion_status.overall_completion

    @classmethod
    def failed(cls, result: ValidationResult) -> "ValidationSummary":
        return cls(questionnaire=result, responses=result, completion=result)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionnaire": self.questionnaire.to_dict(),
            "responses": self.responses.to_dict(),
            "completion": self.completion.to_dict(),
            "overall": {
                "isValid": self.is_valid,
                "errorCount": self.error_count,
                "warningCount": self.warning_count,
                "completionPercentage": self.completion_percentage,
            },
        }


# ============================================================================
# INPUT CHECKS
# ============================================================================

def _check_schema(schema: Any) -> Optional[ValidationResult]:
    if schema is None:
        return ValidationResult.failure(ErrorCode.NULL_DATA, "Questionnaire data is null or undefined")
    if not isinstance(schema, (Mapping, QuestionnaireSchema)):
        return ValidationResult.failure(
            ErrorCode.INVALID_DATA_TYPE,
            f"Questionnaire data must be an object, got {type(schema).__name__}",
        )
    return None


def _check_responses(responses: Any, accepted=(Mapping, ResponseSet)) -> Optional[ValidationResult]:
    if responses is None:
        return ValidationResult.failure(ErrorCode.NULL_DATA, "Response data is null or undefined")
    if not isinstance(responses, accepted):
        return ValidationResult.failure(
            ErrorCode.INVALID_DATA_TYPE,
            f"Response data must be an object, got {type(responses).__name__}",
        )
    return None


def _check_category_id(category_id: Any) -> Optional[ValidationResult]:
    if not isinstance(category_id, str):
        return ValidationResult.failure(
            ErrorCode.INVALID_DATA_TYPE,
            f"Category id must be a string, got {type(category_id).__name__}",
        )
    return None


def _internal_error(operation: str, error: Exception) -> ValidationResult:
    return ValidationResult.failure(
        ErrorCode.INTERNAL_VALIDATION_ERROR,
        f"{operation} failed: {error}",
    )


# ============================================================================
# SERVICE
# ============================================================================

class ValidationService:
    """
    Validation entry point holding its own cache, scheduler and options.

    Create one per process (or per test) and pass it to whoever needs it.

    Example:
        >>> service = ValidationService(ValidationServiceOptions(validation_throttle_seconds=0.5))
        >>> result = await service.validate_responses(responses, schema, real_time=True, entity_id="a1")
        >>> result.is_valid
    """

    def __init__(
        self,
        options: Optional[ValidationServiceOptions] = None,
        cache: Optional[ValidationCache] = None,
        scheduler: Optional[ValidationScheduler] = None,
    ):
        self.options = options or ValidationServiceOptions()
        self.cache = cache or ValidationCache(ttl_seconds=self.options.cache_ttl_seconds)
        self.scheduler = scheduler or ValidationScheduler(
            window_seconds=self.options.validation_throttle_seconds
        )

    # ------------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------------

    @staticmethod
    def _key(kind: str, content_hash: str, entity_id: Optional[str] = None) -> str:
        if entity_id is not None:
            return f"{ValidationCache.entity_prefix(entity_id)}{kind}/{content_hash}"
        return f"{kind}/{content_hash}"

    def _cached(self, key: Callable[[], str], compute: Callable[[], ValidationResult]) -> ValidationResult:
        if not self.options.enable_caching:
            return compute()

        try:
            cache_key = key()
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Could not derive a cache key, validating uncached: {e}")
            return compute()

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        result = compute()
        self.cache.put(cache_key, result)
        return result

    def _guarded(self, operation: str, compute: Callable[[], ValidationResult]) -> ValidationResult:
        try:
            return compute()
        except Exception as e:
            logger.exception(f"{operation} raised an internal error")
            return _internal_error(operation, e)

    # ------------------------------------------------------------------------
    # Synchronous units of work
    # ------------------------------------------------------------------------

    def _structure_now(self, schema: Any) -> ValidationResult:
        return self._cached(
            lambda: self._key("questionnaire", schema_fingerprint(schema)),
            lambda: validate_structure(schema),
        )

    def _responses_now(self, responses: Any, schema: Any, entity_id: Optional[str]) -> ValidationResult:
        return self._guarded("Response validation", lambda: self._cached(
            lambda: self._key("responses", responses_fingerprint(responses, schema), entity_id),
            lambda: validate_responses(responses, schema),
        ))

    def _completion_now(self, responses: Any, schema: Any, entity_id: Optional[str]) -> ValidationResult:
        return self._cached(
            lambda: self._key("completion", responses_fingerprint(responses, schema), entity_id),
            lambda: validate_completion(responses, schema),
        )

    # ------------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------------

    async def validate_questionnaire(self, schema: Any) -> ValidationResult:
        """Validate a schema's structure."""
        invalid = _check_schema(schema)
        if invalid is not None:
            return invalid
        return self._guarded("Questionnaire validation", partial(self._structure_now, schema))

    async def validate_responses(
        self,
        responses: Any,
        schema: Any,
        real_time: bool = False,
        entity_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate responses against a schema.

        With `real_time` set (and real-time validation enabled), requests for
        the same `entity_id` are debounced: callers of one burst all receive
        the result for the last payload submitted. Without an entity id there
        is nothing to debounce on and the validation runs immediately.
        """
        invalid = _check_schema(schema) or _check_responses(responses)
        if invalid is not None:
            return invalid

        entity_key = str(entity_id) if entity_id is not None else None
        if not (real_time and self.options.enable_real_time_validation and entity_key is not None):
            return self._responses_now(responses, schema, entity_key)

        try:
            # The store may keep editing its dict while the window is open
            snapshot = copy.deepcopy(responses)
            work = partial(self._responses_now, snapshot, schema, entity_key)
            return await self.scheduler.submit(entity_key, work)
        except ValidationCancelled:
            return ValidationResult.failure(
                ErrorCode.VALIDATION_CANCELLED,
                f"Validation for assessment '{entity_key}' was cancelled",
            )
        except Exception as e:
            logger.exception("Real-time response validation raised an internal error")
            return _internal_error("Response validation", e)

    async def validate_category_responses(
        self,
        category_id: str,
        category_responses: Any,
        schema: Any,
    ) -> ValidationResult:
        """Validate the answers of one category against that category alone."""
        invalid = (
            _check_category_id(category_id)
            or _check_schema(schema)
            or _check_responses(category_responses, accepted=Mapping)
        )
        if invalid is not None:
            return invalid

        def compute():
            scoped = QuestionnaireSchema.from_dict(schema).restricted_to(category_id)
            return validate_responses({category_id: category_responses}, scoped)

        return self._guarded("Category validation", compute)

    async def validate_completion(
        self,
        responses: Any,
        schema: Any,
        entity_id: Optional[str] = None,
    ) -> ValidationResult:
        """Submission gate. Always computed for the given input, never debounced."""
        invalid = _check_schema(schema) or _check_responses(responses)
        if invalid is not None:
            return invalid
        entity_key = str(entity_id) if entity_id is not None else None
        return self._guarded(
            "Completion validation",
            partial(self._completion_now, responses, schema, entity_key),
        )

    async def get_validation_summary(self, assessment: Any, schema: Any) -> ValidationSummary:
        """Run structure, response and completion validation together."""
        try:
            if isinstance(assessment, AssessmentRecord):
                record = assessment
            elif isinstance(assessment, Mapping):
                record = AssessmentRecord.from_dict(assessment)
            else:
                invalid = _check_responses(assessment)
                return ValidationSummary(
                    questionnaire=await self.validate_questionnaire(schema),
                    responses=invalid,
                    completion=invalid,
                )

            return ValidationSummary(
                questionnaire=await self.validate_questionnaire(schema),
                responses=await self.validate_responses(record.responses, schema, entity_id=record.id),
                completion=await self.validate_completion(record.responses, schema, entity_id=record.id),
            )
        except Exception as e:
            logger.exception("Validation summary raised an internal error")
            return ValidationSummary.failed(_internal_error("Summary validation", e))

    def cancel_validation(self, entity_id: str) -> bool:
        """Stop waiting for a pending or running real-time validation."""
        return self.scheduler.cancel(str(entity_id))

    def clear_cache(self):
        self.cache.clear()

    def clear_entity_cache(self, entity_id: str) -> int:
        return self.cache.invalidate_entity(str(entity_id))

    def get_validation_stats(self) -> Dict[str, Any]:
        cache_stats = self.cache.stats()
        return {
            "cacheSize": cache_stats["size"],
            "cacheHitRate": cache_stats["hitRate"],
            "cacheHits": cache_stats["hits"],
            "cacheMisses": cache_stats["misses"],
            "activeThrottles": self.scheduler.active_count,
            "runsStarted": self.scheduler.runs_started,
            "runsDiscarded": self.scheduler.runs_discarded,
        }

    async def shutdown(self):
        """Cancel every scheduled validation."""
        cancelled = self.scheduler.cancel_all()
        if cancelled:
            logger.info(f"Cancelled {cancelled} scheduled validation(s) on shutdown")


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    "AssessmentRecord",
    "ValidationSummary",
    "ValidationService",
]
