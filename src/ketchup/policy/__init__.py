"""Policy layer: decide which resource kinds and namespaces are collected."""

from ketchup.policy.engine import filter_catalog, resolve_namespaces, should_collect
from ketchup.policy.models import CollectionPolicy, FilteredCatalog

__all__ = [
    "CollectionPolicy",
    "FilteredCatalog",
    "filter_catalog",
    "resolve_namespaces",
    "should_collect",
]
