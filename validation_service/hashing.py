"""Content hashing for cache keys."""
import hashlib
import json
from typing import Any, Mapping

from questionnaire_validation import QuestionnaireSchema, ResponseSet

JSON_SCALARS = (str, int, float, bool, type(None))


def _tag(value: Any) -> str:
    """Type-qualified text, so 1 and "1" never share a key."""
    return f"{type(value).__name__}:{value}"


def canonical_form(content: Any) -> Any:
    """
    JSON-encodable rendering of content that keeps what validators look at.

    Mapping keys become type-qualified strings at every depth, so mappings
    with mixed key types still sort. Values json cannot encode are tagged
    with their type name.
    """
    if isinstance(content, ResponseSet):
        content = content.raw
    if isinstance(content, Mapping):
        return {_tag(k): canonical_form(v) for k, v in content.items()}
    if isinstance(content, (list, tuple)):
        return [canonical_form(v) for v in content]
    if isinstance(content, JSON_SCALARS):
        return content
    return _tag(content)


def compute_hash(content: Any) -> str:
    """
    Compute SHA-256 hash of content.

    Args:
        content: Any JSON-like content, canonicalised first

    Returns:
        Hex string of SHA-256 hash
    """
    # Serialize with sorted keys for consistent hashing
    json_str = json.dumps(canonical_form(content), sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(json_str.encode('utf-8')).hexdigest()


def schema_fingerprint(schema: Any) -> str:
    """Hash of the schema's canonical form, independent of how it was supplied."""
    return compute_hash(QuestionnaireSchema.from_dict(schema).to_dict())


def responses_fingerprint(responses: Any, schema: Any) -> str:
    """Hash of a response set together with the schema it is validated against."""
    return compute_hash({
        "responses": responses,
        "schema": schema_fingerprint(schema),
    })
