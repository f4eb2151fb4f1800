"""Collection layer: list objects of the selected kinds and sanitize them."""

from ketchup.collection.client import ClusterClient
from ketchup.collection.collector import Collector
from ketchup.collection.models import CollectedObject, CollectionErrorEntry, CollectionResult
from ketchup.collection.sanitizer import sanitize, sanitize_object, sanitize_result

__all__ = [
    "ClusterClient",
    "CollectedObject",
    "CollectionErrorEntry",
    "CollectionResult",
    "Collector",
    "sanitize",
    "sanitize_object",
    "sanitize_result",
]
