"""
Network index: which managed resources own which IP addresses.

The index is rebuilt wholesale from the catalog and published as an
immutable snapshot. Readers hold a reference to one snapshot, so they see
either the old map or the new one, never a partially built map.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable

import structlog

from crosstag.matching.addresses import extract_addresses
from crosstag.resources.catalog import ResourceCatalog
from crosstag.resources.models import ResourceIdentifier

logger = structlog.get_logger()

DEFAULT_TTL = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NetworkIndex:
    """Immutable address -> resources snapshot."""

    entries: Mapping[str, frozenset[ResourceIdentifier]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    built_at: datetime | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def lookup(self, address: str) -> frozenset[ResourceIdentifier]:
        return self.entries.get(address, frozenset())

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize to dictionary (address -> sorted resource keys)."""
        return {address: sorted(i.key for i in ids) for address, ids in sorted(self.entries.items())}


def build_network_index(catalog: ResourceCatalog, now: datetime) -> NetworkIndex:
    """Scan every reachable resource type and index the addresses found."""
    building: dict[str, set[ResourceIdentifier]] = {}

    for _descriptor, resources in catalog.iter_instances():
        for resource in resources:
            addresses = extract_addresses(resource)
            if not addresses:
                continue
            identifier = resource.identifier()
            for address in addresses:
                building.setdefault(address, set()).add(identifier)

    frozen = {address: frozenset(ids) for address, ids in building.items()}
    return NetworkIndex(entries=MappingProxyType(frozen), built_at=now)


@dataclass
class NetworkIndexCache:
    """
    Owns the current network index and its staleness policy.

    The index is stale when it is empty or older than ``ttl``. Rebuilds run
    synchronously in the caller; there is no background refresh.
    """

    catalog: ResourceCatalog
    ttl: timedelta = DEFAULT_TTL
    clock: Callable[[], datetime] = _utcnow

    _index: NetworkIndex = field(default_factory=NetworkIndex, repr=False)

    @property
    def index(self) -> NetworkIndex:
        return self._index

    def is_stale(self, now: datetime | None = None) -> bool:
        index = self._index
        if index.built_at is None or len(index) == 0:
            return True
        now = now or self.clock()
        return now - index.built_at > self.ttl

    def rebuild(self, now: datetime | None = None) -> NetworkIndex:
        """Rebuild the index and publish it as one reference swap."""
        now = now or self.clock()
        logger.info("network_index_rebuild_started")

        index = build_network_index(self.catalog, now)
        self._index = index

        logger.info("network_index_rebuilt", address_count=len(index))
        return index

    def get_or_rebuild(self, now: datetime | None = None) -> NetworkIndex:
        """Return the current index, rebuilding it first if stale."""
        now = now or self.clock()
        if self.is_stale(now):
            return self.rebuild(now)
        return self._index

    def lookup(self, address: str) -> frozenset[ResourceIdentifier]:
        return self._index.lookup(address)
