"""
Validation Service.

Caching, debounced real-time scheduling and fault containment around the
questionnaire validation engine, plus the options and logging setup used by
the HTTP app in main.py.

Usage:
    from validation_service import ValidationService, ValidationServiceOptions

    service = ValidationService(ValidationServiceOptions.from_env())
    result = await service.validate_responses(responses, schema, real_time=True, entity_id="a1")

Package Structure:
    - config.py: Service options (pydantic) and logging setup
    - hashing.py: Content hashes used as cache keys
    - cache.py: TTL cache with per-entity invalidation
    - scheduler.py: Per-entity debounce / supersede / cancel state machine
    - service.py: ValidationService, ValidationSummary, AssessmentRecord
"""

from .config import ValidationServiceOptions, setup_logging
from .hashing import compute_hash, schema_fingerprint, responses_fingerprint
from .cache import CacheEntry, ValidationCache
from .scheduler import SchedulerState, ValidationCancelled, ValidationScheduler
from .service import AssessmentRecord, ValidationSummary, ValidationService


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    # Configuration
    "ValidationServiceOptions",
    "setup_logging",

    # Hashing
    "compute_hash",
    "schema_fingerprint",
    "responses_fingerprint",

    # Cache
    "CacheEntry",
    "ValidationCache",

    # Scheduling
    "SchedulerState",
    "ValidationCancelled",
    "ValidationScheduler",

    # Service
    "AssessmentRecord",
    "ValidationSummary",
    "ValidationService",
]
