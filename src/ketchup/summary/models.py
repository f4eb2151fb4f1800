"""Summary statistics reported for a collection run."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ketchup.collection.models import CollectionErrorEntry


class SummaryStats(BaseModel):
    """Counts derived from collected objects; totals always reconcile with them."""

    total_namespaces: int = Field(default=0, description="Namespaces visited, including empty ones")
    total_cluster_resources: int = 0
    total_namespaced_resources: int = 0
    cluster_resource_counts: dict[str, int] = Field(default_factory=dict)
    namespace_resource_counts: dict[str, dict[str, int]] = Field(default_factory=dict)
    optional_resources_included: frozenset[str] = Field(default_factory=frozenset)
    resource_type_counts: dict[str, int] = Field(
        default_factory=dict,
        description="kind -> count across cluster scope and every namespace",
    )
    sanitized: bool = True
    cancelled: bool = False
    errors: list[CollectionErrorEntry] = Field(default_factory=list)

    @property
    def total_resources(self) -> int:
        return self.total_cluster_resources + self.total_namespaced_resources
