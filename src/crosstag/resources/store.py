"""
Resource stores: where managed resources are listed, read and written.

KubernetesResourceStore talks to the cluster through the CustomObjectsApi
(Crossplane managed resources are cluster-scoped custom objects).
InMemoryResourceStore backs tests and the offline CLI mode.

Store errors are normalized to BackendUnavailable, ResourceNotFound and
ResourceConflict so callers never see raw client exceptions.
"""

from __future__ import annotations

import copy
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from crosstag.core.errors import (
    BackendUnavailable,
    ConfigurationError,
    ResourceConflict,
    ResourceNotFound,
)
from crosstag.resources.models import (
    ManagedResource,
    ResourceIdentifier,
    ResourceTypeDescriptor,
    plural_for_kind,
)

logger = structlog.get_logger()

# Lazy import kubernetes to allow offline use without a cluster
_kubernetes_available: bool | None = None


def check_kubernetes_available() -> bool:
    """Check if kubernetes package is installed."""
    global _kubernetes_available
    if _kubernetes_available is None:
        try:
            import kubernetes  # noqa: F401

            _kubernetes_available = True
        except ImportError:
            _kubernetes_available = False
    return _kubernetes_available


class ResourceStore(ABC):
    """
    Abstract access to managed resources.

    Implementations must:
    - list(): return every instance of one resource type
    - get(): fetch the current state of one resource
    - update(): persist a resource, honouring metadata.resourceVersion
    """

    @abstractmethod
    def list(self, descriptor: ResourceTypeDescriptor) -> list[ManagedResource]:
        """
        List instances of a resource type.

        Raises:
            BackendUnavailable: if the type cannot be listed
        """

    @abstractmethod
    def get(self, identifier: ResourceIdentifier) -> ManagedResource:
        """
        Fetch one resource fresh from the backend.

        Raises:
            ResourceNotFound: if the resource no longer exists
            BackendUnavailable: on any other read failure
        """

    @abstractmethod
    def update(self, resource: ManagedResource) -> ManagedResource:
        """
        Write a resource back.

        Raises:
            ResourceNotFound: if the resource was deleted
            ResourceConflict: if its resourceVersion is stale
            BackendUnavailable: on any other write failure
        """


def _translate_api_error(exc: Exception, action: str, target: str) -> Exception:
    """Map a kubernetes client exception onto the crosstag error taxonomy."""
    status = getattr(exc, "status", None)
    details = {"action": action, "target": target, "status": status}

    if status == 404:
        return ResourceNotFound(f"{target} not found", details)
    if status == 409:
        return ResourceConflict(f"Conflict writing {target}: {getattr(exc, 'reason', exc)}", details)
    return BackendUnavailable(f"Failed to {action} {target}: {exc}", details)


@dataclass
class KubernetesResourceStore(ResourceStore):
    """
    Managed resources read from the Kubernetes API.

    Configuration:
        kubeconfig: Path to kubeconfig file (optional)
        context: Kubeconfig context to use (optional)
        timeout: API request timeout in seconds

    Environment variables:
        KUBECONFIG: Standard kubeconfig path
        CROSSTAG_KUBE_CONTEXT: Kubeconfig context
    """

    kubeconfig: str | None = field(default_factory=lambda: os.environ.get("KUBECONFIG"))
    context: str | None = field(default_factory=lambda: os.environ.get("CROSSTAG_KUBE_CONTEXT"))
    timeout: float = 30.0

    # Internal state
    _api_client: Any = field(default=None, repr=False, compare=False)
    _initialized: bool = field(default=False, repr=False, compare=False)

    def _ensure_initialized(self) -> None:
        """Initialize Kubernetes client if not already done."""
        if self._initialized:
            return

        if not check_kubernetes_available():
            raise BackendUnavailable(
                "kubernetes package not installed. Install with: pip install kubernetes"
            )

        from kubernetes import client, config

        # Try in-cluster config first, then kubeconfig
        try:
            config.load_incluster_config()
        except config.ConfigException:
            try:
                config.load_kube_config(
                    config_file=self.kubeconfig,
                    context=self.context,
                )
            except config.ConfigException as e:
                raise BackendUnavailable(f"Failed to load Kubernetes config: {e}") from e

        self._api_client = client.ApiClient()
        self._initialized = True

    def _get_custom_api(self) -> Any:
        """Get CustomObjectsApi client."""
        self._ensure_initialized()
        from kubernetes import client

        return client.CustomObjectsApi(self._api_client)

    def list(self, descriptor: ResourceTypeDescriptor) -> list[ManagedResource]:
        api = self._get_custom_api()
        try:
            response = api.list_cluster_custom_object(
                descriptor.group,
                descriptor.version,
                descriptor.plural,
                _request_timeout=self.timeout,
            )
        except Exception as e:
            # Any list failure, including 404 for a CRD that is not installed
            raise BackendUnavailable(
                f"Failed to list {descriptor}: {e}",
                {"action": "list", "target": str(descriptor), "status": getattr(e, "status", None)},
            ) from e

        items = response.get("items", []) if isinstance(response, dict) else []
        return [ManagedResource(item, descriptor=descriptor) for item in items]

    def get(self, identifier: ResourceIdentifier) -> ManagedResource:
        api = self._get_custom_api()
        try:
            obj = api.get_cluster_custom_object(
                identifier.group,
                identifier.version,
                identifier.plural,
                identifier.name,
                _request_timeout=self.timeout,
            )
        except Exception as e:
            raise _translate_api_error(e, "get", identifier.key) from e

        return ManagedResource(obj, descriptor=identifier.descriptor)

    def update(self, resource: ManagedResource) -> ManagedResource:
        api = self._get_custom_api()
        identifier = resource.identifier()
        try:
            # Carries metadata.resourceVersion, so the API server rejects stale writes
            obj = api.replace_cluster_custom_object(
                identifier.group,
                identifier.version,
                identifier.plural,
                identifier.name,
                resource.obj,
                _request_timeout=self.timeout,
            )
        except Exception as e:
            raise _translate_api_error(e, "update", identifier.key) from e

        return ManagedResource(obj, descriptor=resource.descriptor)


@dataclass
class InMemoryResourceStore(ResourceStore):
    """
    Resource store held in memory.

    Every successful update is recorded in ``writes`` and bumps the stored
    resourceVersion, so optimistic-concurrency behaviour matches the API
    server. Descriptors listed in ``unavailable`` fail with BackendUnavailable.
    """

    _objects: dict[ResourceTypeDescriptor, dict[str, dict[str, Any]]] = field(default_factory=dict)
    unavailable: set[ResourceTypeDescriptor] = field(default_factory=set)
    writes: list[ManagedResource] = field(default_factory=list)

    def add(
        self,
        obj: dict[str, Any],
        descriptor: ResourceTypeDescriptor | None = None,
    ) -> ManagedResource:
        """Add (or replace) a resource object."""
        resource = ManagedResource(copy.deepcopy(obj), descriptor=descriptor)
        if descriptor is None:
            descriptor = ResourceTypeDescriptor(
                group=resource.group,
                version=resource.version,
                plural=plural_for_kind(resource.kind),
            )
            resource.descriptor = descriptor

        metadata = resource.obj.setdefault("metadata", {})
        metadata.setdefault("resourceVersion", "1")

        self._objects.setdefault(descriptor, {})[resource.name] = resource.obj
        return ManagedResource(copy.deepcopy(resource.obj), descriptor=descriptor)

    def remove(self, identifier: ResourceIdentifier) -> None:
        self._objects.get(identifier.descriptor, {}).pop(identifier.name, None)

    def list(self, descriptor: ResourceTypeDescriptor) -> list[ManagedResource]:
        if descriptor in self.unavailable:
            raise BackendUnavailable(f"Failed to list {descriptor}", {"target": str(descriptor)})
        return [
            ManagedResource(copy.deepcopy(obj), descriptor=descriptor)
            for obj in self._objects.get(descriptor, {}).values()
        ]

    def get(self, identifier: ResourceIdentifier) -> ManagedResource:
        descriptor = identifier.descriptor
        if descriptor in self.unavailable:
            raise BackendUnavailable(f"Failed to get {identifier.key}", {"target": identifier.key})
        obj = self._objects.get(descriptor, {}).get(identifier.name)
        if obj is None:
            raise ResourceNotFound(f"{identifier.key} not found", {"target": identifier.key})
        return ManagedResource(copy.deepcopy(obj), descriptor=descriptor)

    def update(self, resource: ManagedResource) -> ManagedResource:
        identifier = resource.identifier()
        descriptor = identifier.descriptor
        if descriptor in self.unavailable:
            raise BackendUnavailable(f"Failed to update {identifier.key}", {"target": identifier.key})

        current = self._objects.get(descriptor, {}).get(identifier.name)
        if current is None:
            raise ResourceNotFound(f"{identifier.key} not found", {"target": identifier.key})

        current_version = current.get("metadata", {}).get("resourceVersion")
        if resource.resource_version is not None and resource.resource_version != current_version:
            raise ResourceConflict(
                f"Conflict writing {identifier.key}: resourceVersion changed",
                {"target": identifier.key, "expected": resource.resource_version},
            )

        obj = copy.deepcopy(resource.obj)
        obj.setdefault("metadata", {})["resourceVersion"] = str(int(current_version or "0") + 1)
        self._objects[descriptor][identifier.name] = obj

        stored = ManagedResource(copy.deepcopy(obj), descriptor=descriptor)
        self.writes.append(stored)
        return stored

    @property
    def write_count(self) -> int:
        return len(self.writes)

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryResourceStore:
        """
        Load resources from a YAML file.

        Accepts a multi-document stream of objects, or a single document that
        is either a list of objects or a ``kind: List`` with ``items``.
        """
        path = Path(path)
        try:
            with open(path) as f:
                documents = [doc for doc in yaml.safe_load_all(f) if doc]
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read resources file: {e}", {"path": str(path)}) from e

        objects: list[dict[str, Any]] = []
        for doc in documents:
            if isinstance(doc, list):
                objects.extend(doc)
            elif isinstance(doc, dict) and "items" in doc:
                objects.extend(doc.get("items") or [])
            elif isinstance(doc, dict):
                objects.append(doc)

        store = cls()
        for obj in objects:
            if not isinstance(obj, dict):
                logger.warning("skipping_non_object_resource", path=str(path))
                continue
            store.add(obj)

        logger.debug("loaded_resources_file", path=str(path), count=len(objects))
        return store
