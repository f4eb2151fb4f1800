"""Apply the opt-in/opt-out collection policy to a discovered catalog."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ketchup.discovery.models import Catalog, ResourceKind
from ketchup.policy.models import CollectionPolicy, FilteredCatalog

logger = logging.getLogger(__name__)

# Never listable in a useful way (deprecated or create-only)
ALWAYS_EXCLUDED = frozenset({"ComponentStatus", "Binding"})

# Built-in kinds that are skipped unless their flag is set
OPT_IN_KINDS: dict[str, str] = {
    "Secret": "include_secrets",
    "Event": "include_events",
    "ReplicaSet": "include_replicasets",
    "Endpoints": "include_endpoints",
    "EndpointSlice": "include_endpoints",
    "Lease": "include_leases",
}


def _matches_specific_crd(kind: ResourceKind, wanted: frozenset[str]) -> bool:
    names = {kind.crd_name.lower(), kind.kind.lower()}
    return any(w.lower() in names for w in wanted)


def should_collect(kind: ResourceKind, policy: CollectionPolicy) -> bool:
    """Decide whether a single kind is collected under the policy."""
    if kind.is_custom_resource:
        if policy.specific_crds:
            return _matches_specific_crd(kind, policy.specific_crds)
        return policy.include_custom_resources
    if kind.kind in ALWAYS_EXCLUDED:
        return False
    flag = OPT_IN_KINDS.get(kind.kind)
    if flag is not None:
        return bool(getattr(policy, flag))
    return True


def filter_catalog(catalog: Catalog, policy: CollectionPolicy) -> FilteredCatalog:
    """Select the kinds to collect. Pure apart from logging."""
    selected = frozenset(k for k in catalog.kinds if should_collect(k, policy))
    for kind in catalog.kinds - selected:
        logger.debug("Skipping resource kind: %s", kind.name)

    if policy.specific_crds:
        custom = catalog.custom_resources
        for wanted in sorted(policy.specific_crds):
            if not any(_matches_specific_crd(k, frozenset({wanted})) for k in custom):
                logger.warning("Requested CRD '%s' is not served by the cluster, skipping", wanted)

    logger.info("Selected %d of %d resource kinds for collection", len(selected), len(catalog))
    return FilteredCatalog(kinds=selected, namespace_filter=policy.namespace_filter)


def resolve_namespaces(
    namespace_filter: Iterable[str],
    live: Iterable[str] | None,
) -> tuple[list[str], list[str]]:
    """Return (namespaces to visit, unknown requested namespaces), both sorted.

    With an empty filter every live namespace is visited. Unknown names are a
    warning, never an error. When the live set is unavailable the filter is
    trusted as given.
    """
    requested = set(namespace_filter)
    if live is None:
        return sorted(requested), []
    available = set(live)
    if not requested:
        return sorted(available), []
    unknown = sorted(requested - available)
    for ns in unknown:
        logger.warning("Namespace '%s' does not exist, skipping", ns)
    return sorted(requested & available), unknown
