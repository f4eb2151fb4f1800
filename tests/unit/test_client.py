"""Tests for the Kubernetes API client wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import urllib3
from kubernetes.client.rest import ApiException

from conftest import make_kind
from ketchup.collection.client import ClusterClient, group_version_path, list_path
from ketchup.errors import ClientError


@pytest.fixture
def api_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(api_client: MagicMock) -> ClusterClient:
    return ClusterClient(api_client, request_timeout=5.0)


class TestPaths:
    def test_core_cluster_scoped(self) -> None:
        assert list_path(make_kind("Node", namespaced=False)) == "/api/v1/nodes"

    def test_group_namespaced(self) -> None:
        kind = make_kind("Deployment", group="apps")

        assert list_path(kind, "prod") == "/apis/apps/v1/namespaces/prod/deployments"

    def test_group_version_path(self) -> None:
        assert group_version_path("v1") == "/api/v1"
        assert group_version_path("apps/v1") == "/apis/apps/v1"


class TestListPage:
    def test_passes_limit_continue_and_timeout(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.return_value = {
            "items": [{"metadata": {"name": "a"}}],
            "metadata": {"continue": "next-token"},
        }

        items, token = client.list_page(
            make_kind("ConfigMap"),
            namespace="default",
            limit=100,
            continue_token="tok",
            timeout=2.0,
        )

        assert items == [{"metadata": {"name": "a"}}]
        assert token == "next-token"
        args, kwargs = api_client.call_api.call_args
        assert args == ("/api/v1/namespaces/default/configmaps", "GET")
        assert kwargs["query_params"] == [("limit", 100), ("continue", "tok")]
        assert kwargs["response_type"] == "object"
        assert kwargs["_request_timeout"] == 2.0

    def test_last_page_has_no_token(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.return_value = {"items": [], "metadata": {"continue": ""}}

        items, token = client.list_page(make_kind("Node", namespaced=False))

        assert items == []
        assert token is None
        assert api_client.call_api.call_args.kwargs["_request_timeout"] == 5.0

    def test_http_error_becomes_client_error(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.side_effect = ApiException(status=503, reason="Service Unavailable")

        with pytest.raises(ClientError) as exc_info:
            client.list_page(make_kind("Pod"), namespace="default")

        assert exc_info.value.status == 503
        assert str(exc_info.value) == "[503] Service Unavailable"

    def test_timeout_becomes_client_error(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.side_effect = urllib3.exceptions.ReadTimeoutError(None, "/api/v1/pods", "timed out")

        with pytest.raises(ClientError) as exc_info:
            client.list_page(make_kind("Pod"), namespace="default")

        assert exc_info.value.status is None
        assert "ReadTimeoutError" in str(exc_info.value)

    def test_unexpected_body(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.return_value = "not json"

        with pytest.raises(ClientError):
            client.list_page(make_kind("Pod"), namespace="default")


class TestDiscoveryCalls:
    def test_server_groups_and_versions(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.side_effect = [
            {"versions": ["v1"]},
            {"groups": [{"name": "apps"}]},
            {"resources": [{"name": "deployments"}]},
        ]

        assert client.server_versions() == ["v1"]
        assert client.server_groups() == [{"name": "apps"}]
        assert client.server_resources("apps/v1") == [{"name": "deployments"}]
        paths = [c.args[0] for c in api_client.call_api.call_args_list]
        assert paths == ["/api", "/apis", "/apis/apps/v1"]

    def test_list_namespaces_follows_pages(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.side_effect = [
            {"items": [{"metadata": {"name": "default"}}], "metadata": {"continue": "c1"}},
            {"items": [{"metadata": {"name": "kube-system"}}, {"metadata": {}}], "metadata": {}},
        ]

        assert client.list_namespaces() == ["default", "kube-system"]
        second = api_client.call_api.call_args_list[1]
        assert ("continue", "c1") in second.kwargs["query_params"]

    def test_unauthorized(self, client: ClusterClient, api_client: MagicMock) -> None:
        api_client.call_api.side_effect = ApiException(status=401, reason="Unauthorized")

        with pytest.raises(ClientError) as exc_info:
            client.server_groups()

        assert exc_info.value.is_unauthorized


class TestKubeconfig:
    def test_missing_kubeconfig(self, tmp_path) -> None:
        with pytest.raises(ClientError, match="failed to load kubeconfig"):
            ClusterClient.from_kubeconfig(tmp_path / "missing-config")
