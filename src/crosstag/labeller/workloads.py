"""
Workload sources: namespaces and pods observed in the cluster.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from crosstag.core.errors import BackendUnavailable, ConfigurationError
from crosstag.resources.store import check_kubernetes_available

logger = structlog.get_logger()


@dataclass
class PodInfo:
    """The parts of a pod that resolution needs."""

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    ips: list[str] = field(default_factory=list)

    @property
    def workload_name(self) -> str:
        """The workload-name label, falling back to the pod name."""
        return self.labels.get("workload-name") or self.name


def pod_ips(status: Any) -> list[str]:
    """All pod IPs from a V1PodStatus: podIPs, else the single podIP."""
    if status is None:
        return []
    ips = [entry.ip for entry in (status.pod_i_ps or []) if entry.ip]
    if not ips and status.pod_ip:
        ips.append(status.pod_ip)
    return ips


class WorkloadSource(ABC):
    """Lists namespaces and pods."""

    @abstractmethod
    def list_namespaces(self) -> list[str]:
        """Names of all namespaces."""

    @abstractmethod
    def list_pods(self, namespace: str) -> list[PodInfo]:
        """Pods in one namespace."""


@dataclass
class KubernetesWorkloadSource(WorkloadSource):
    """
    Namespaces and pods from the Kubernetes API.

    Configuration:
        kubeconfig: Path to kubeconfig file (optional)
        context: Kubeconfig context to use (optional)
        timeout: API request timeout in seconds
    """

    kubeconfig: str | None = field(default_factory=lambda: os.environ.get("KUBECONFIG"))
    context: str | None = field(default_factory=lambda: os.environ.get("CROSSTAG_KUBE_CONTEXT"))
    timeout: float = 30.0

    # Internal state
    _core_api: Any = field(default=None, repr=False, compare=False)

    def _get_core_api(self) -> Any:
        """Get CoreV1Api client, loading cluster config on first use."""
        if self._core_api is not None:
            return self._core_api

        if not check_kubernetes_available():
            raise BackendUnavailable(
                "kubernetes package not installed. Install with: pip install kubernetes"
            )

        from kubernetes import client, config

        try:
            config.load_incluster_config()
        except config.ConfigException:
            try:
                config.load_kube_config(config_file=self.kubeconfig, context=self.context)
            except config.ConfigException as e:
                raise BackendUnavailable(f"Failed to load Kubernetes config: {e}") from e

        self._core_api = client.CoreV1Api()
        return self._core_api

    def list_namespaces(self) -> list[str]:
        api = self._get_core_api()
        try:
            namespaces = api.list_namespace(timeout_seconds=int(self.timeout))
        except Exception as e:
            raise BackendUnavailable(f"Failed to list namespaces: {e}") from e
        return [ns.metadata.name for ns in namespaces.items]

    def list_pods(self, namespace: str) -> list[PodInfo]:
        api = self._get_core_api()
        try:
            pods = api.list_namespaced_pod(namespace, timeout_seconds=int(self.timeout))
        except Exception as e:
            raise BackendUnavailable(
                f"Failed to list pods: {e}", {"namespace": namespace}
            ) from e

        return [
            PodInfo(
                name=pod.metadata.name,
                namespace=pod.metadata.namespace or namespace,
                labels=dict(pod.metadata.labels or {}),
                ips=pod_ips(pod.status),
            )
            for pod in pods.items
        ]


@dataclass
class InMemoryWorkloadSource(WorkloadSource):
    """Workloads held in memory, for tests and offline runs."""

    pods: list[PodInfo] = field(default_factory=list)
    namespaces: list[str] = field(default_factory=list)

    def list_namespaces(self) -> list[str]:
        names = list(self.namespaces)
        for pod in self.pods:
            if pod.namespace not in names:
                names.append(pod.namespace)
        return names

    def list_pods(self, namespace: str) -> list[PodInfo]:
        return [pod for pod in self.pods if pod.namespace == namespace]

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryWorkloadSource:
        """
        Load pods from a YAML file.

        Expected shape:
            namespaces: [billing-prod]
            pods:
              - name: api-7d9f
                namespace: billing-prod
                labels: {team: billing}
                ips: [10.0.3.4]
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read workloads file: {e}", {"path": str(path)}) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Workloads file must be a mapping", {"path": str(path)})

        pods = []
        for entry in data.get("pods") or []:
            if not isinstance(entry, dict):
                raise ConfigurationError("Each pod entry must be a mapping", {"path": str(path)})
            if not entry.get("name") or not entry.get("namespace"):
                raise ConfigurationError("Each pod needs a name and a namespace", {"path": str(path)})
            pods.append(
                PodInfo(
                    name=str(entry["name"]),
                    namespace=str(entry["namespace"]),
                    labels={str(k): str(v) for k, v in (entry.get("labels") or {}).items()},
                    ips=[str(ip) for ip in entry.get("ips") or []],
                )
            )

        logger.debug("loaded_workloads_file", path=str(path), pods=len(pods))
        return cls(pods=pods, namespaces=[str(n) for n in data.get("namespaces") or []])
