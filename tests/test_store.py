"""Tests for resource stores."""

from unittest.mock import MagicMock, patch

import pytest

from crosstag.core.errors import (
    BackendUnavailable,
    ConfigurationError,
    ResourceConflict,
    ResourceNotFound,
)
from crosstag.resources.catalog import ResourceCatalog
from crosstag.resources.models import ManagedResource, ResourceIdentifier, ResourceTypeDescriptor
from crosstag.resources.store import InMemoryResourceStore, KubernetesResourceStore

BUCKETS = ResourceTypeDescriptor("storage.gcp.upbound.io", "v1beta1", "buckets")
BUCKET_ID = ResourceIdentifier("Bucket", "data", "storage.gcp.upbound.io", "v1beta1", "buckets")


class ApiException(Exception):
    """Stand-in for kubernetes.client.ApiException (carries a status)."""

    def __init__(self, status, reason=""):
        super().__init__(f"({status}) {reason}")
        self.status = status
        self.reason = reason


class TestInMemoryResourceStore:
    """Tests for the in-memory store."""

    def test_add_and_list(self, store, resource_factory):
        store.add(resource_factory("Bucket", "data"))

        resources = store.list(BUCKETS)

        assert [r.name for r in resources] == ["data"]
        assert resources[0].resource_version == "1"

    def test_get_missing(self, store):
        with pytest.raises(ResourceNotFound):
            store.get(BUCKET_ID)

    def test_returns_copies(self, store, resource_factory):
        """Test callers cannot mutate stored objects."""
        store.add(resource_factory("Bucket", "data", labels={"a": "1"}))

        store.get(BUCKET_ID).obj["metadata"]["labels"]["a"] = "changed"

        assert store.get(BUCKET_ID).labels == {"a": "1"}

    def test_update_bumps_version(self, store, resource_factory):
        store.add(resource_factory("Bucket", "data"))
        current = store.get(BUCKET_ID)

        stored = store.update(current.with_labels({"team": "billing"}))

        assert stored.resource_version == "2"
        assert store.get(BUCKET_ID).labels == {"team": "billing"}
        assert store.write_count == 1

    def test_stale_update_conflicts(self, store, resource_factory):
        store.add(resource_factory("Bucket", "data"))
        stale = store.get(BUCKET_ID)
        store.update(stale.with_labels({"first": "write"}))

        with pytest.raises(ResourceConflict):
            store.update(stale.with_labels({"second": "write"}))

        assert store.get(BUCKET_ID).labels == {"first": "write"}

    def test_unavailable(self, store, resource_factory):
        store.add(resource_factory("Bucket", "data"))
        store.unavailable.add(BUCKETS)

        with pytest.raises(BackendUnavailable):
            store.list(BUCKETS)
        with pytest.raises(BackendUnavailable):
            store.get(BUCKET_ID)

    def test_from_file_multi_document(self, tmp_path):
        path = tmp_path / "resources.yaml"
        path.write_text(
            """
apiVersion: storage.gcp.upbound.io/v1beta1
kind: Bucket
metadata:
  name: data
---
apiVersion: compute.gcp.upbound.io/v1beta1
kind: Instance
metadata:
  name: web-1
"""
        )

        store = InMemoryResourceStore.from_file(path)

        assert [r.name for r in store.list(BUCKETS)] == ["data"]
        assert store.get(
            ResourceIdentifier("Instance", "web-1", "compute.gcp.upbound.io", "v1beta1", "instances")
        )

    def test_from_file_list_kind(self, tmp_path):
        path = tmp_path / "resources.yaml"
        path.write_text(
            """
kind: List
items:
  - apiVersion: storage.gcp.upbound.io/v1beta1
    kind: Bucket
    metadata:
      name: data
"""
        )

        store = InMemoryResourceStore.from_file(path)

        assert len(store.list(BUCKETS)) == 1

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            InMemoryResourceStore.from_file(tmp_path / "nope.yaml")

    def test_from_file_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed")

        with pytest.raises(ConfigurationError):
            InMemoryResourceStore.from_file(path)


class TestResourceCatalog:
    """Tests for catalog iteration."""

    def test_skips_unavailable_types(self, store, resource_factory):
        store.add(resource_factory("Bucket", "data"))
        store.add(resource_factory("Instance", "web-1", group="compute.gcp.upbound.io"))
        store.unavailable.add(BUCKETS)

        names = [r.name for _, resources in ResourceCatalog(store=store).iter_instances() for r in resources]

        assert names == ["web-1"]


class TestKubernetesResourceStore:
    """Tests for the Kubernetes-backed store with a mocked API."""

    @pytest.fixture
    def api(self):
        return MagicMock()

    @pytest.fixture
    def k8s_store(self, api):
        store = KubernetesResourceStore(timeout=5.0)
        patcher = patch.object(store, "_get_custom_api", return_value=api)
        patcher.start()
        yield store
        patcher.stop()

    def test_env_var_config(self, monkeypatch):
        monkeypatch.setenv("KUBECONFIG", "/path/to/kubeconfig")
        monkeypatch.setenv("CROSSTAG_KUBE_CONTEXT", "test-context")

        store = KubernetesResourceStore()

        assert store.kubeconfig == "/path/to/kubeconfig"
        assert store.context == "test-context"

    def test_list(self, k8s_store, api, resource_factory):
        api.list_cluster_custom_object.return_value = {"items": [resource_factory("Bucket", "data")]}

        resources = k8s_store.list(BUCKETS)

        assert [r.key for r in resources] == ["Bucket/data"]
        assert resources[0].descriptor == BUCKETS
        api.list_cluster_custom_object.assert_called_once_with(
            "storage.gcp.upbound.io", "v1beta1", "buckets", _request_timeout=5.0
        )

    def test_list_missing_crd(self, k8s_store, api):
        """Test a 404 on list marks the type unavailable."""
        api.list_cluster_custom_object.side_effect = ApiException(404, "Not Found")

        with pytest.raises(BackendUnavailable):
            k8s_store.list(BUCKETS)

    def test_get_not_found(self, k8s_store, api):
        api.get_cluster_custom_object.side_effect = ApiException(404, "Not Found")

        with pytest.raises(ResourceNotFound):
            k8s_store.get(BUCKET_ID)

    def test_get_server_error(self, k8s_store, api):
        api.get_cluster_custom_object.side_effect = ApiException(500, "Internal")

        with pytest.raises(BackendUnavailable):
            k8s_store.get(BUCKET_ID)

    def test_update_sends_resource_version(self, k8s_store, api, resource_factory):
        obj = resource_factory("Bucket", "data", labels={"team": "billing"})
        obj["metadata"]["resourceVersion"] = "42"
        api.replace_cluster_custom_object.return_value = obj

        k8s_store.update(ManagedResource(obj, descriptor=BUCKETS))

        args = api.replace_cluster_custom_object.call_args
        assert args.args[:4] == ("storage.gcp.upbound.io", "v1beta1", "buckets", "data")
        assert args.args[4]["metadata"]["resourceVersion"] == "42"

    def test_update_conflict(self, k8s_store, api, resource_factory):
        api.replace_cluster_custom_object.side_effect = ApiException(409, "Conflict")

        with pytest.raises(ResourceConflict):
            k8s_store.update(ManagedResource(resource_factory("Bucket", "data"), descriptor=BUCKETS))
