"""
Confidence scoring for (resource, target) pairs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from crosstag.matching.policy import ScoringPolicy
from crosstag.matching.signals import Signal, extract_identity_signals
from crosstag.resources.models import ManagedResource


def combine_weights(weights: list[float]) -> float:
    """
    Combine signal weights into one confidence value.

    Each weight w is itself weighted by w², i.e. Σw³ / Σw². The aggregate
    leans toward the strongest signal, so one exact label match is not
    diluted by several incidental substring hits. Changing this formula
    changes which resources cross the match threshold.
    """
    if not weights:
        return 0.0

    weighted_total = 0.0
    total_weight = 0.0
    for w in weights:
        weighted_total += w * w**2
        total_weight += w**2

    if total_weight > 0:
        return weighted_total / total_weight

    # Only reachable with all-zero weights
    return sum(weights) / len(weights)


@dataclass
class ConfidenceScorer:
    """Scores how likely a resource belongs to a namespace or workload."""

    policy: ScoringPolicy = field(default_factory=ScoringPolicy)

    def signals(self, resource: ManagedResource, target: str, subject: str = "namespace") -> list[Signal]:
        return extract_identity_signals(resource, target, self.policy, subject=subject)

    def score(
        self,
        resource: ManagedResource,
        target: str,
        subject: str = "namespace",
    ) -> tuple[list[str], float]:
        """
        Score a resource against a target name.

        Returns:
            (reasons, confidence); ([], 0.0) when no signal fired
        """
        signals = self.signals(resource, target, subject=subject)
        if not signals:
            return [], 0.0

        reasons = [s.reason for s in signals]
        return reasons, combine_weights([s.weight for s in signals])
