"""
Wiring shared by CLI commands: stores, catalog and resolver from settings.
"""

from __future__ import annotations

from datetime import timedelta

import structlog

from crosstag.config.settings import Settings, get_settings
from crosstag.core.errors import ConfigurationError
from crosstag.labeller.workloads import (
    InMemoryWorkloadSource,
    KubernetesWorkloadSource,
    WorkloadSource,
)
from crosstag.matching.network import NetworkIndexCache
from crosstag.matching.resolver import MatchResolver
from crosstag.matching.scorer import ConfidenceScorer
from crosstag.resources.catalog import ResourceCatalog
from crosstag.resources.store import (
    InMemoryResourceStore,
    KubernetesResourceStore,
    ResourceStore,
)

logger = structlog.get_logger()


def build_store(settings: Settings | None = None, resources_file: str | None = None) -> ResourceStore:
    """
    Resource store for the current run.

    A resources file (from the flag or settings) selects the in-memory store;
    otherwise the Kubernetes API is used.
    """
    settings = settings or get_settings()
    path = resources_file or settings.resources_file

    if path:
        logger.debug("using_resources_file", path=path)
        return InMemoryResourceStore.from_file(path)
    if settings.mock_backend:
        raise ConfigurationError("mock_backend requires a resources file (--resources-file)")

    return KubernetesResourceStore(
        kubeconfig=settings.kubeconfig,
        context=settings.kube_context,
        timeout=settings.request_timeout,
    )


def build_workloads(settings: Settings | None = None, workloads_file: str | None = None) -> WorkloadSource:
    """Workload source: a YAML file if given, otherwise the Kubernetes API."""
    settings = settings or get_settings()
    if workloads_file:
        return InMemoryWorkloadSource.from_file(workloads_file)
    if settings.mock_backend:
        raise ConfigurationError("mock_backend requires a workloads file (--workloads-file)")
    return KubernetesWorkloadSource(
        kubeconfig=settings.kubeconfig,
        context=settings.kube_context,
        timeout=settings.request_timeout,
    )


def build_resolver(store: ResourceStore, settings: Settings | None = None) -> MatchResolver:
    """Resolver over every watched type, tuned by settings."""
    settings = settings or get_settings()
    catalog = ResourceCatalog(store=store)
    return MatchResolver(
        catalog=catalog,
        scorer=ConfidenceScorer(),
        network=NetworkIndexCache(
            catalog=catalog,
            ttl=timedelta(seconds=settings.network_index_ttl_seconds),
        ),
        threshold=settings.match_threshold,
        network_confidence=settings.network_confidence,
    )
