"""
Catalog of watched Crossplane resource types.

The type list is compiled in: it covers the Upbound GCP provider families
whose resources carry cost-relevant labels.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from crosstag.core.errors import BackendUnavailable
from crosstag.resources.models import ManagedResource, ResourceTypeDescriptor
from crosstag.resources.store import ResourceStore

logger = structlog.get_logger()


def _types(group: str, *entries: tuple[str, str]) -> list[ResourceTypeDescriptor]:
    return [ResourceTypeDescriptor(group=group, version=v, plural=p) for v, p in entries]


RESOURCE_TYPES: tuple[ResourceTypeDescriptor, ...] = tuple(
    # Compute
    _types(
        "compute.gcp.upbound.io",
        ("v1beta1", "instances"),
        ("v1beta1", "disks"),
        ("v1beta1", "firewalls"),
        ("v1beta1", "networks"),
        ("v1beta1", "subnetworks"),
        ("v1beta1", "routers"),
        ("v1beta1", "addresses"),
    )
    # Storage
    + _types(
        "storage.gcp.upbound.io",
        ("v1beta1", "buckets"),
        ("v1beta1", "bucketiammembers"),
        ("v1beta1", "bucketobjects"),
    )
    # Databases
    + _types(
        "sql.gcp.upbound.io",
        ("v1beta1", "databaseinstances"),
        ("v1beta2", "databaseinstances"),
        ("v1beta1", "databases"),
        ("v1beta1", "users"),
        ("v1beta1", "sslcerts"),
    )
    + _types("redis.gcp.upbound.io", ("v1beta1", "instances"))
    + _types("bigtable.gcp.upbound.io", ("v1beta1", "instances"), ("v1beta1", "tables"))
    + _types("spanner.gcp.upbound.io", ("v1beta1", "instances"), ("v1beta1", "databases"))
    # Messaging
    + _types(
        "pubsub.gcp.upbound.io",
        ("v1beta1", "topics"),
        ("v1beta1", "subscriptions"),
        ("v1beta1", "topiciammembers"),
    )
    # Functions and scheduling
    + _types("cloudfunctions.gcp.upbound.io", ("v1beta1", "functions"))
    + _types("kms.gcp.upbound.io", ("v1beta1", "cryptokeys"), ("v1beta1", "keyrings"))
    + _types("cloudscheduler.gcp.upbound.io", ("v1beta1", "jobs"))
    # IAM
    + _types(
        "iam.gcp.upbound.io",
        ("v1beta1", "serviceaccounts"),
        ("v1beta1", "serviceaccountkeys"),
    )
    + _types(
        "cloudplatform.gcp.upbound.io",
        ("v1beta1", "serviceaccounts"),
        ("v1beta1", "serviceaccountiammembers"),
        ("v1beta1", "projectiammembers"),
    )
)


def list_resource_types() -> list[ResourceTypeDescriptor]:
    """Return the watched resource types, in listing order."""
    return list(RESOURCE_TYPES)


@dataclass
class ResourceCatalog:
    """Lists live managed resources for every watched type."""

    store: ResourceStore
    resource_types: list[ResourceTypeDescriptor] = field(default_factory=list_resource_types)

    def list_instances(self, descriptor: ResourceTypeDescriptor) -> list[ManagedResource]:
        """
        List instances of one type.

        Raises:
            BackendUnavailable: if the store cannot be reached for this type
        """
        return self.store.list(descriptor)

    def iter_instances(self) -> Iterator[tuple[ResourceTypeDescriptor, list[ManagedResource]]]:
        """
        Yield (descriptor, instances) for every reachable type.

        Types whose listing fails are logged and skipped; partial results
        are expected when CRDs for some provider families are not installed.
        """
        for descriptor in self.resource_types:
            try:
                instances = self.list_instances(descriptor)
            except BackendUnavailable as e:
                logger.warning(
                    "resource_type_unavailable",
                    resource_type=str(descriptor),
                    error=e.message,
                )
                continue
            yield descriptor, instances
