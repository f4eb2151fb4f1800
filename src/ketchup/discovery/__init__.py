"""Discovery layer: resolve the cluster's listable resource kinds at run time."""

from ketchup.discovery.models import Catalog, ResourceKind, Scope
from ketchup.discovery.resolver import discover

__all__ = [
    "Catalog",
    "ResourceKind",
    "Scope",
    "discover",
]
