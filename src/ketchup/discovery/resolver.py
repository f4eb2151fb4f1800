"""Build the catalog of listable resource kinds from the API discovery documents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ketchup.discovery.models import Catalog, ResourceKind, Scope
from ketchup.errors import ClientError, FatalDiscoveryError, PartialDiscoveryWarning

if TYPE_CHECKING:
    from ketchup.collection.client import ClusterClient

logger = logging.getLogger(__name__)

CRD_GROUP = "apiextensions.k8s.io"


def _group_versions(group: dict[str, Any]) -> list[str]:
    """Group-versions of a discovered group, preferred first, then in server order."""
    versions = [v.get("groupVersion") for v in group.get("versions") or [] if v.get("groupVersion")]
    preferred = (group.get("preferredVersion") or {}).get("groupVersion")
    if preferred:
        versions = [preferred] + [v for v in versions if v != preferred]
    return versions


def _split_group_version(group_version: str) -> tuple[str, str]:
    if "/" in group_version:
        group, version = group_version.split("/", 1)
        return group, version
    return "", group_version


def _resolve_group(client: ClusterClient, group_versions: list[str]) -> dict[tuple[str, str], ResourceKind]:
    """Resolve one group's kinds; the first version (the preferred one) wins per kind."""
    kinds: dict[tuple[str, str], ResourceKind] = {}
    for group_version in group_versions:
        group, version = _split_group_version(group_version)
        for res in client.server_resources(group_version):
            name = res.get("name") or ""
            if "/" in name or "list" not in (res.get("verbs") or []):
                continue
            key = (group, res.get("kind") or "")
            if not key[1] or key in kinds:
                continue
            kinds[key] = ResourceKind(
                group=group,
                version=version,
                kind=key[1],
                plural=name,
                scope=Scope.NAMESPACED if res.get("namespaced") else Scope.CLUSTER,
            )
    return kinds


def _looks_builtin(group: str) -> bool:
    """Classify a group without CRD information (fallback only)."""
    if not group or "." not in group:
        return True
    return group.endswith(".k8s.io") and not group.endswith(".x-k8s.io")


def _crd_kind(crd: dict[str, Any]) -> ResourceKind | None:
    """Build a ResourceKind from a CustomResourceDefinition document."""
    spec = crd.get("spec") or {}
    names = spec.get("names") or {}
    served = [v for v in spec.get("versions") or [] if v.get("served")]
    if not (spec.get("group") and names.get("kind") and names.get("plural") and served):
        return None
    storage = next((v for v in served if v.get("storage")), served[0])
    return ResourceKind(
        group=spec["group"],
        version=storage["name"],
        kind=names["kind"],
        plural=names["plural"],
        scope=Scope.CLUSTER if spec.get("scope") == "Cluster" else Scope.NAMESPACED,
        is_custom_resource=True,
    )


def _mark_custom_resources(
    client: ClusterClient,
    kinds: dict[tuple[str, str], ResourceKind],
    warnings: list[PartialDiscoveryWarning],
) -> None:
    # Groups whose discovery failed stay out of the catalog, CRDs included
    failed_groups = {w.group for w in warnings}
    try:
        crds = client.list_custom_resource_definitions()
    except ClientError as e:
        if e.is_unauthorized:
            raise FatalDiscoveryError(f"authentication failed during discovery: {e}") from e
        warning = PartialDiscoveryWarning(CRD_GROUP, f"cannot list CustomResourceDefinitions ({e})")
        logger.warning("%s; classifying custom resources by group name", warning)
        warnings.append(warning)
        for key, kind in kinds.items():
            if not _looks_builtin(kind.group):
                kinds[key] = kind.model_copy(update={"is_custom_resource": True})
        return

    for crd in crds:
        crd_kind = _crd_kind(crd)
        if crd_kind is None:
            logger.debug("Skipping CRD without a served version: %s", (crd.get("metadata") or {}).get("name"))
            continue
        if crd_kind.group in failed_groups:
            logger.debug("Skipping CRD %s: discovery of its group failed", crd_kind.crd_name)
            continue
        existing = kinds.get(crd_kind.key)
        if existing is not None:
            kinds[crd_kind.key] = existing.model_copy(update={"is_custom_resource": True})
        else:
            logger.debug("CRD %s not in discovery; using its spec", crd_kind.crd_name)
            kinds[crd_kind.key] = crd_kind


def discover(client: ClusterClient) -> Catalog:
    """Query the discovery surface and return the catalog of listable kinds.

    Raises FatalDiscoveryError when the root discovery documents cannot be
    fetched or the credentials are rejected. A failing group is skipped and
    recorded as a PartialDiscoveryWarning.
    """
    try:
        core_versions = client.server_versions()
        groups = client.server_groups()
    except ClientError as e:
        raise FatalDiscoveryError(f"cannot reach the discovery endpoint: {e}") from e

    entries: list[tuple[str, list[str]]] = []
    if core_versions:
        entries.append(("", list(core_versions)))
    for g in groups:
        entries.append((g.get("name") or "", _group_versions(g)))

    kinds: dict[tuple[str, str], ResourceKind] = {}
    warnings: list[PartialDiscoveryWarning] = []
    skipped = 0
    for group, group_versions in entries:
        try:
            resolved = _resolve_group(client, group_versions)
        except ClientError as e:
            if e.is_unauthorized:
                raise FatalDiscoveryError(f"authentication failed during discovery: {e}") from e
            warning = PartialDiscoveryWarning(group, str(e))
            logger.warning("%s; skipping group", warning)
            warnings.append(warning)
            skipped += 1
            continue
        logger.debug("Group %s: %d listable kinds", group or "core", len(resolved))
        kinds.update(resolved)

    _mark_custom_resources(client, kinds, warnings)

    catalog = Catalog(kinds=frozenset(kinds.values()), warnings=tuple(warnings))
    logger.info(
        "Discovered %d resource kinds (%d custom) across %d API groups",
        len(catalog),
        len(catalog.custom_resources),
        len(entries) - skipped,
    )
    return catalog
