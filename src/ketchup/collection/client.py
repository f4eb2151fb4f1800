"""Read-only access to the Kubernetes API: discovery documents, paginated lists, namespaces."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ketchup.discovery.models import ResourceKind
from ketchup.errors import ClientError

logger = logging.getLogger(__name__)

# Default request timeout in seconds for a single API call
DEFAULT_REQUEST_TIMEOUT = 30.0

CRD_PATH = "/apis/apiextensions.k8s.io/v1/customresourcedefinitions"


def _load_kube_config(kubeconfig_path: str | Path, context: str | None) -> client.Configuration:
    """Load configuration from an explicit kubeconfig file."""
    cfg = client.Configuration()
    try:
        config.load_kube_config(
            config_file=str(kubeconfig_path),
            context=context,
            client_configuration=cfg,
        )
    except (config.ConfigException, OSError) as e:
        raise ClientError(f"failed to load kubeconfig {kubeconfig_path}: {e}") from e
    return cfg


def list_path(kind: ResourceKind, namespace: str | None = None) -> str:
    """Build the collection URL for a kind, optionally scoped to a namespace."""
    prefix = f"/apis/{kind.group}/{kind.version}" if kind.group else f"/api/{kind.version}"
    if namespace is not None:
        return f"{prefix}/namespaces/{namespace}/{kind.plural}"
    return f"{prefix}/{kind.plural}"


def group_version_path(group_version: str) -> str:
    return f"/apis/{group_version}" if "/" in group_version else f"/api/{group_version}"


class ClusterClient:
    """Thin GET-only wrapper around ``kubernetes.client.ApiClient`` returning plain dicts.

    Every failure (HTTP status, transport, timeout, undecodable body) is raised
    as :class:`ketchup.errors.ClientError` so callers handle a single type.
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._api = api_client
        self.request_timeout = request_timeout

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: str | Path,
        context: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> ClusterClient:
        logger.info("Loading kubeconfig from: %s", kubeconfig)
        cfg = _load_kube_config(kubeconfig, context)
        return cls(client.ApiClient(cfg), request_timeout=request_timeout)

    def _get(
        self,
        path: str,
        query: list[tuple[str, Any]] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        logger.debug("GET %s %s", path, query or "")
        try:
            data = self._api.call_api(
                path,
                "GET",
                query_params=query or [],
                header_params={"Accept": "application/json"},
                response_type="object",
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
                _preload_content=True,
                _request_timeout=timeout or self.request_timeout,
            )
        except ApiException as e:
            raise ClientError(e.reason or "API error", status=e.status) from e
        except (urllib3.exceptions.HTTPError, OSError, ValueError) as e:
            raise ClientError(f"{type(e).__name__}: {e}") from e
        if not isinstance(data, dict):
            raise ClientError(f"unexpected response body for {path}: {type(data).__name__}")
        return data

    # Discovery

    def server_versions(self) -> list[str]:
        """Versions served by the core (legacy) group, from ``/api``."""
        return list(self._get("/api").get("versions") or [])

    def server_groups(self) -> list[dict[str, Any]]:
        """Named API groups from ``/apis`` (each with ``versions`` and ``preferredVersion``)."""
        return list(self._get("/apis").get("groups") or [])

    def server_resources(self, group_version: str) -> list[dict[str, Any]]:
        """APIResource entries served under one group-version."""
        return list(self._get(group_version_path(group_version)).get("resources") or [])

    def list_custom_resource_definitions(self) -> list[dict[str, Any]]:
        return self._list_all(CRD_PATH)

    def list_namespaces(self) -> list[str]:
        items = self._list_all("/api/v1/namespaces")
        names = [(i.get("metadata") or {}).get("name") for i in items]
        return [n for n in names if n]

    # Listing

    def list_page(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        limit: int | None = None,
        continue_token: str | None = None,
        timeout: float | None = None,
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Fetch one page of a kind; returns (items, next continuation token or None)."""
        query: list[tuple[str, Any]] = []
        if limit:
            query.append(("limit", limit))
        if continue_token:
            query.append(("continue", continue_token))
        data = self._get(list_path(kind, namespace), query=query, timeout=timeout)
        token = (data.get("metadata") or {}).get("continue") or None
        return list(data.get("items") or []), token

    def _list_all(self, path: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        token: str | None = None
        while True:
            query: list[tuple[str, Any]] = [("limit", 500)]
            if token:
                query.append(("continue", token))
            data = self._get(path, query=query)
            items.extend(data.get("items") or [])
            token = (data.get("metadata") or {}).get("continue") or None
            if not token:
                return items
