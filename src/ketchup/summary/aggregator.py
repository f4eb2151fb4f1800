"""Reduce a collection result to summary statistics."""

from __future__ import annotations

from collections import Counter

from ketchup.collection.models import CollectionResult
from ketchup.summary.models import SummaryStats


def _sorted_counts(counter: Counter[str]) -> dict[str, int]:
    return {k: counter[k] for k in sorted(counter)}


def summarize(result: CollectionResult) -> SummaryStats:
    """Compute summary statistics from the collected objects alone.

    ``total_namespaces`` counts namespaces visited during collection, including
    those that yielded no objects. Output is deterministic for a given result.
    """
    cluster_counts: Counter[str] = Counter()
    namespace_counts: dict[str, Counter[str]] = {ns: Counter() for ns in result.namespaces}
    for obj in result.objects:
        if obj.namespace is None:
            cluster_counts[obj.kind.name] += 1
        else:
            namespace_counts.setdefault(obj.namespace, Counter())[obj.kind.name] += 1

    totals = Counter(cluster_counts)
    for counts in namespace_counts.values():
        totals.update(counts)

    return SummaryStats(
        total_namespaces=len(namespace_counts),
        total_cluster_resources=sum(cluster_counts.values()),
        total_namespaced_resources=sum(sum(c.values()) for c in namespace_counts.values()),
        cluster_resource_counts=_sorted_counts(cluster_counts),
        namespace_resource_counts={ns: _sorted_counts(namespace_counts[ns]) for ns in sorted(namespace_counts)},
        optional_resources_included=result.policy.optional_resources_included(),
        resource_type_counts=_sorted_counts(totals),
        sanitized=result.policy.sanitize,
        cancelled=result.cancelled,
        errors=list(result.errors),
    )
