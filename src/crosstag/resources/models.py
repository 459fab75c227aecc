"""
Data models for managed resources and resolution results.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from crosstag.resources.document import Document


def plural_for_kind(kind: str) -> str:
    """Best-effort resource plural for a kind, e.g. Address -> addresses."""
    lower = kind.lower()
    if lower.endswith(("s", "x", "ch", "sh")):
        return f"{lower}es"
    if lower.endswith("y") and lower[-2:-1] not in ("a", "e", "i", "o", "u"):
        return f"{lower[:-1]}ies"
    return f"{lower}s"


@dataclass(frozen=True)
class ResourceTypeDescriptor:
    """One watchable collection of managed resources (group/version/plural)."""

    group: str
    version: str
    plural: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    def __str__(self) -> str:
        return f"{self.plural}.{self.group}/{self.version}"


@dataclass(frozen=True)
class ResourceIdentifier:
    """Lightweight handle to a managed resource, kept in the network index."""

    kind: str
    name: str
    group: str
    version: str
    plural: str

    @property
    def key(self) -> str:
        return f"{self.kind}/{self.name}"

    @property
    def descriptor(self) -> ResourceTypeDescriptor:
        return ResourceTypeDescriptor(group=self.group, version=self.version, plural=self.plural)


class ManagedResource:
    """
    A Crossplane managed resource as returned by the Kubernetes API.

    The raw object is kept as-is; accessors read through a Document so that
    malformed or partial objects never raise.
    """

    def __init__(
        self,
        obj: dict[str, Any],
        descriptor: ResourceTypeDescriptor | None = None,
    ):
        self.obj = obj
        self.doc = Document(obj)
        self.descriptor = descriptor

    def __repr__(self) -> str:
        return f"ManagedResource({self.key})"

    @property
    def kind(self) -> str:
        return self.doc.str_at("kind") or ""

    @property
    def name(self) -> str:
        return self.doc.str_at("metadata", "name") or ""

    @property
    def api_version(self) -> str:
        return self.doc.str_at("apiVersion") or ""

    @property
    def group(self) -> str:
        if "/" in self.api_version:
            return self.api_version.split("/", 1)[0]
        return self.descriptor.group if self.descriptor else ""

    @property
    def version(self) -> str:
        if "/" in self.api_version:
            return self.api_version.split("/", 1)[1]
        return self.descriptor.version if self.descriptor else self.api_version

    @property
    def labels(self) -> dict[str, str]:
        return self.doc.path("metadata", "labels").string_map()

    @property
    def resource_version(self) -> str | None:
        return self.doc.str_at("metadata", "resourceVersion")

    @property
    def spec(self) -> Document:
        return self.doc.get("spec")

    @property
    def status(self) -> Document:
        return self.doc.get("status")

    @property
    def for_provider(self) -> Document:
        return self.doc.path("spec", "forProvider")

    @property
    def key(self) -> str:
        """Deduplication key used throughout resolution."""
        return f"{self.kind}/{self.name}"

    def identifier(self) -> ResourceIdentifier:
        plural = self.descriptor.plural if self.descriptor else plural_for_kind(self.kind)
        return ResourceIdentifier(
            kind=self.kind,
            name=self.name,
            group=self.group,
            version=self.version,
            plural=plural,
        )

    def with_labels(self, labels: dict[str, str]) -> ManagedResource:
        """Copy of this resource with metadata.labels replaced."""
        obj = copy.deepcopy(self.obj)
        obj.setdefault("metadata", {})["labels"] = dict(labels)
        return ManagedResource(obj, descriptor=self.descriptor)


@dataclass
class ResourceMatch:
    """A managed resource judged to belong to a workload."""

    resource: ManagedResource
    confidence: float
    reasons: list[str] = field(default_factory=list)

    # "metadata" for scored matches, "network" for address matches
    source: str = "metadata"

    @property
    def key(self) -> str:
        return self.resource.key

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "kind": self.resource.kind,
            "name": self.resource.name,
            "apiVersion": self.resource.api_version,
            "confidence": round(self.confidence, 4),
            "reasons": list(self.reasons),
            "source": self.source,
        }
