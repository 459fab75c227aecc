"""
Match resolver: which managed resources belong to a namespace or workload.

Resolution runs in two phases:
1. Metadata: score every listed resource against the target name and keep
   those above the threshold.
2. Network (optional): resources that own one of the workload's observed
   IP addresses are added with a fixed, high confidence.

Results are deduplicated by kind/name and ordered by confidence, highest
first; ties keep discovery order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import structlog

from crosstag.core.errors import BackendUnavailable, ResourceNotFound
from crosstag.matching.network import NetworkIndexCache
from crosstag.matching.scorer import ConfidenceScorer
from crosstag.resources.catalog import ResourceCatalog
from crosstag.resources.models import ResourceMatch

logger = structlog.get_logger()

DEFAULT_THRESHOLD = 0.30
DEFAULT_NETWORK_CONFIDENCE = 0.90


def sort_matches(matches: list[ResourceMatch]) -> list[ResourceMatch]:
    """Order by confidence, highest first. Stable, so ties keep their order."""
    return sorted(matches, key=lambda m: m.confidence, reverse=True)


@dataclass
class MatchResolver:
    """
    Resolves a target name (plus optional pod IPs) to ranked resource matches.

    Attributes:
        catalog: Source of managed resources
        scorer: Metadata confidence scorer
        network: Network index cache (created from the catalog if omitted)
        threshold: Minimum confidence (exclusive) for a metadata match
        network_confidence: Confidence given to network-evidence matches
    """

    catalog: ResourceCatalog
    scorer: ConfidenceScorer = field(default_factory=ConfidenceScorer)
    network: NetworkIndexCache | None = None
    threshold: float = DEFAULT_THRESHOLD
    network_confidence: float = DEFAULT_NETWORK_CONFIDENCE

    def __post_init__(self) -> None:
        if self.network is None:
            self.network = NetworkIndexCache(catalog=self.catalog)

    def resolve_by_name(self, target: str, subject: str = "namespace") -> list[ResourceMatch]:
        """
        Find resources whose metadata ties them to the target.

        Args:
            target: Namespace or workload name
            subject: "namespace" or "workload", used in match reasons

        Returns:
            Matches above the threshold, highest confidence first
        """
        matches: list[ResourceMatch] = []
        seen: set[str] = set()

        for _descriptor, resources in self.catalog.iter_instances():
            for resource in resources:
                if resource.key in seen:
                    continue

                reasons, confidence = self.scorer.score(resource, target, subject=subject)
                if confidence <= self.threshold:
                    continue

                matches.append(ResourceMatch(resource=resource, confidence=confidence, reasons=reasons))
                seen.add(resource.key)
                logger.debug(
                    "resource_matched",
                    resource=resource.key,
                    target=target,
                    confidence=confidence,
                    reasons=", ".join(reasons),
                )

        matches = sort_matches(matches)
        logger.info("resources_resolved", target=target, subject=subject, count=len(matches))
        return matches

    def resolve_by_name_with_network(
        self,
        target: str,
        addresses: list[str] | None,
        subject: str = "namespace",
        now: datetime | None = None,
    ) -> list[ResourceMatch]:
        """
        Metadata resolution, corroborated by network evidence.

        With no addresses this is exactly resolve_by_name().

        Args:
            target: Namespace or workload name
            addresses: IP addresses observed for the workload (pod IPs)
            subject: "namespace" or "workload", used in match reasons
            now: Clock override for the index staleness check

        Returns:
            Combined matches, highest confidence first
        """
        matches = self.resolve_by_name(target, subject=subject)
        if not addresses:
            return matches

        assert self.network is not None
        index = self.network.get_or_rebuild(now)
        seen = {m.key for m in matches}

        for address in addresses:
            for identifier in sorted(index.lookup(address), key=lambda i: i.key):
                if identifier.key in seen:
                    continue

                try:
                    resource = self.catalog.store.get(identifier)
                except (ResourceNotFound, BackendUnavailable) as e:
                    logger.warning(
                        "network_match_fetch_failed",
                        resource=identifier.key,
                        error=e.message,
                    )
                    continue

                logger.info(
                    "network_connection_found",
                    pod_ip=address,
                    resource=identifier.key,
                    target=target,
                )
                matches.append(
                    ResourceMatch(
                        resource=resource,
                        confidence=self.network_confidence,
                        reasons=[f"Network connection detected from pod IP {address}"],
                        source="network",
                    )
                )
                seen.add(identifier.key)

        return sort_matches(matches)
