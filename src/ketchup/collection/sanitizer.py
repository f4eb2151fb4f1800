"""Strip server-generated fields so collected documents can be reapplied."""

from __future__ import annotations

from typing import Any

from ketchup.collection.models import CollectedObject, CollectionResult

# Metadata fields assigned by the API server
RUNTIME_METADATA_FIELDS = (
    "uid",
    "resourceVersion",
    "selfLink",
    "creationTimestamp",
    "generation",
    "managedFields",
)


def sanitize(body: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``body`` without runtime metadata and the top-level ``status``.

    Never mutates its input and never fails on missing fields, so applying it
    twice gives the same document as applying it once.
    """
    cleaned = {k: v for k, v in body.items() if k != "status"}
    metadata = cleaned.get("metadata")
    if isinstance(metadata, dict):
        cleaned["metadata"] = {k: v for k, v in metadata.items() if k not in RUNTIME_METADATA_FIELDS}
    return cleaned


def sanitize_object(obj: CollectedObject) -> CollectedObject:
    return obj.model_copy(update={"body": sanitize(obj.body)})


def sanitize_result(result: CollectionResult) -> CollectionResult:
    """Sanitize every object when the run's policy asks for it; otherwise return ``result`` as is."""
    if not result.policy.sanitize:
        return result
    return result.model_copy(update={"objects": [sanitize_object(o) for o in result.objects]})
