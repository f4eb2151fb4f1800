"""Shared fixtures for ketchup tests.

Provides an in-memory cluster client that serves discovery documents, CRDs,
namespaces and paginated list responses, so discovery and collection can be
exercised without touching a real Kubernetes cluster.
"""

from __future__ import annotations

import threading
import time
from typing import Any

import pytest

from ketchup.discovery.models import ResourceKind, Scope
from ketchup.errors import ClientError

# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------

LIST_VERBS = ["get", "list", "watch", "create", "update", "patch", "delete"]


def make_kind(
    kind: str,
    plural: str | None = None,
    group: str = "",
    version: str = "v1",
    namespaced: bool = True,
    custom: bool = False,
) -> ResourceKind:
    """Create a ResourceKind with sensible defaults for testing."""
    return ResourceKind(
        group=group,
        version=version,
        kind=kind,
        plural=plural or f"{kind.lower()}s",
        scope=Scope.NAMESPACED if namespaced else Scope.CLUSTER,
        is_custom_resource=custom,
    )


def make_item(name: str, namespace: str | None = None, **extra: Any) -> dict[str, Any]:
    """Create a list item as the API server returns it (no apiVersion/kind)."""
    metadata: dict[str, Any] = {
        "name": name,
        "uid": f"uid-{name}",
        "resourceVersion": "1001",
        "creationTimestamp": "2024-01-01T00:00:00Z",
        "generation": 2,
        "managedFields": [{"manager": "kubectl"}],
        "labels": {"app": name},
    }
    if namespace is not None:
        metadata["namespace"] = namespace
    item: dict[str, Any] = {"metadata": metadata, "spec": {"replicas": 1}, "status": {"ready": True}}
    item.update(extra)
    return item


def api_resource(
    name: str,
    kind: str,
    namespaced: bool = True,
    verbs: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "kind": kind,
        "namespaced": namespaced,
        "verbs": LIST_VERBS if verbs is None else verbs,
    }


def api_group(name: str, versions: list[str], preferred: str | None = None) -> dict[str, Any]:
    preferred = preferred or versions[0]
    return {
        "name": name,
        "versions": [{"groupVersion": f"{name}/{v}", "version": v} for v in versions],
        "preferredVersion": {"groupVersion": f"{name}/{preferred}", "version": preferred},
    }


def make_crd(
    group: str,
    kind: str,
    plural: str,
    versions: list[tuple[str, bool, bool]] | None = None,
    scope: str = "Namespaced",
) -> dict[str, Any]:
    """CRD document; versions are (name, served, storage) triples."""
    versions = versions or [("v1", True, True)]
    return {
        "metadata": {"name": f"{plural}.{group}"},
        "spec": {
            "group": group,
            "names": {"kind": kind, "plural": plural},
            "scope": scope,
            "versions": [{"name": n, "served": s, "storage": st} for n, s, st in versions],
        },
    }


# ---------------------------------------------------------------------------
# Fake client
# ---------------------------------------------------------------------------


class FakeClusterClient:
    """In-memory stand-in for ketchup.collection.client.ClusterClient."""

    def __init__(self) -> None:
        self.core_versions: list[str] = ["v1"]
        self.groups: list[dict[str, Any]] = []
        self.resources: dict[str, list[dict[str, Any]]] = {}
        self.crds: list[dict[str, Any]] = []
        self.namespaces: list[str] = []
        # (group, plural, namespace) -> list of pages
        self.pages: dict[tuple[str, str, str | None], list[list[dict[str, Any]]]] = {}
        # (group, plural, namespace) -> error raised on the given page index
        self.failures: dict[tuple[str, str, str | None], tuple[int, ClientError]] = {}
        self.discovery_error: ClientError | None = None
        self.group_errors: dict[str, ClientError] = {}
        self.crd_error: ClientError | None = None
        self.namespace_error: ClientError | None = None
        self.latency = 0.0
        self.on_list = None

        self.calls: list[tuple[str, str, str | None, str | None]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    # Discovery

    def server_versions(self) -> list[str]:
        if self.discovery_error:
            raise self.discovery_error
        return list(self.core_versions)

    def server_groups(self) -> list[dict[str, Any]]:
        if self.discovery_error:
            raise self.discovery_error
        return list(self.groups)

    def server_resources(self, group_version: str) -> list[dict[str, Any]]:
        if group_version in self.group_errors:
            raise self.group_errors[group_version]
        return list(self.resources.get(group_version, []))

    def list_custom_resource_definitions(self) -> list[dict[str, Any]]:
        if self.crd_error:
            raise self.crd_error
        return list(self.crds)

    def list_namespaces(self) -> list[str]:
        if self.namespace_error:
            raise self.namespace_error
        return list(self.namespaces)

    # Listing

    def set_items(self, kind: ResourceKind, items: list[dict[str, Any]], namespace: str | None = None) -> None:
        self.pages[(kind.group, kind.plural, namespace)] = [items]

    def set_pages(self, kind: ResourceKind, pages: list[list[dict[str, Any]]], namespace: str | None = None) -> None:
        self.pages[(kind.group, kind.plural, namespace)] = pages

    def fail(self, kind: ResourceKind, error: ClientError, namespace: str | None = None, page: int = 0) -> None:
        self.failures[(kind.group, kind.plural, namespace)] = (page, error)

    def list_page(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        limit: int | None = None,
        continue_token: str | None = None,
        timeout: float | None = None,
    ) -> tuple[list[dict[str, Any]], str | None]:
        key = (kind.group, kind.plural, namespace)
        with self._lock:
            self.calls.append((kind.group, kind.plural, namespace, continue_token))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                time.sleep(self.latency)
            if self.on_list is not None:
                self.on_list(kind, namespace)
            index = int(continue_token) if continue_token else 0
            failure = self.failures.get(key)
            if failure is not None and failure[0] == index:
                raise failure[1]
            pages = self.pages.get(key, [[]])
            token = str(index + 1) if index + 1 < len(pages) else None
            return [dict(item) for item in pages[index]], token
        finally:
            with self._lock:
                self.in_flight -= 1

    def listed(self, namespace: str | None = None) -> set[str]:
        """Plurals listed (first page) in the given namespace."""
        return {plural for _, plural, ns, token in self.calls if ns == namespace and token is None}


@pytest.fixture
def fake_client() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def populated_client() -> FakeClusterClient:
    """A small cluster: core + apps + a custom group with one CRD."""
    fake = FakeClusterClient()
    fake.groups = [api_group("apps", ["v1"]), api_group("example.com", ["v1"])]
    fake.resources = {
        "v1": [
            api_resource("pods", "Pod"),
            api_resource("pods/log", "Pod", verbs=["get"]),
            api_resource("configmaps", "ConfigMap"),
            api_resource("secrets", "Secret"),
            api_resource("namespaces", "Namespace", namespaced=False),
            api_resource("nodes", "Node", namespaced=False),
            api_resource("bindings", "Binding", verbs=["create"]),
        ],
        "apps/v1": [
            api_resource("deployments", "Deployment"),
            api_resource("deployments/scale", "Scale"),
            api_resource("replicasets", "ReplicaSet"),
        ],
        "example.com/v1": [api_resource("widgets", "Widget")],
    }
    fake.crds = [make_crd("example.com", "Widget", "widgets")]
    fake.namespaces = ["default", "kube-system"]
    return fake
