"""
Managed resources: document model, stores and the watched-type catalog.
"""

from crosstag.resources.catalog import RESOURCE_TYPES, ResourceCatalog, list_resource_types
from crosstag.resources.document import Document, DocumentKind
from crosstag.resources.models import (
    ManagedResource,
    ResourceIdentifier,
    ResourceMatch,
    ResourceTypeDescriptor,
    plural_for_kind,
)
from crosstag.resources.store import (
    InMemoryResourceStore,
    KubernetesResourceStore,
    ResourceStore,
)

__all__ = [
    # Documents
    "Document",
    "DocumentKind",
    # Models
    "ManagedResource",
    "ResourceIdentifier",
    "ResourceMatch",
    "ResourceTypeDescriptor",
    "plural_for_kind",
    # Stores
    "ResourceStore",
    "KubernetesResourceStore",
    "InMemoryResourceStore",
    # Catalog
    "RESOURCE_TYPES",
    "ResourceCatalog",
    "list_resource_types",
]
