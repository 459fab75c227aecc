"""
Identity signal extraction.

Given a managed resource and a target (a namespace or workload name), find
every piece of metadata evidence that ties the two together.
"""

from __future__ import annotations

from dataclasses import dataclass

from crosstag.matching.policy import ScoringPolicy, SignalKind
from crosstag.resources.models import ManagedResource


@dataclass(frozen=True)
class Signal:
    """One piece of identity evidence."""

    kind: SignalKind
    weight: float
    reason: str


def extract_identity_signals(
    resource: ManagedResource,
    target: str,
    policy: ScoringPolicy | None = None,
    subject: str = "namespace",
) -> list[Signal]:
    """
    Collect identity signals for a (resource, target) pair.

    Checks, in order:
    1. Resource name contains the target (case-insensitive)
    2. Well-known labels equal to the target
    3. Other label values containing the target (case-insensitive)
    4. Well-known labels equal to the target in spec.forProvider.labels
    5. String fields directly under spec.forProvider containing the target

    Args:
        resource: Resource to inspect
        target: Namespace or workload name
        policy: Weights to use (defaults when omitted)
        subject: Word used in reasons ("namespace" or "workload")

    Returns:
        Signals in the order they were found
    """
    if not target:
        return []

    policy = policy or ScoringPolicy()
    needle = target.lower()
    signals: list[Signal] = []

    if needle in resource.name.lower():
        signals.append(
            Signal(
                kind=SignalKind.NAME_CONTAINS,
                weight=policy.weight(SignalKind.NAME_CONTAINS),
                reason=f"Resource name contains {subject}: {target}",
            )
        )

    labels = resource.labels
    well_known = set(policy.well_known_labels)
    for key in policy.well_known_labels:
        if labels.get(key) == target:
            signals.append(
                Signal(
                    kind=SignalKind.LABEL_EXACT,
                    weight=policy.label_weight(key),
                    reason=f"Resource has '{key}' label matching the {subject}",
                )
            )

    # Well-known keys only count on an exact match
    for key, value in labels.items():
        if key in well_known:
            continue
        if needle in value.lower():
            signals.append(
                Signal(
                    kind=SignalKind.LABEL_VALUE_CONTAINS,
                    weight=policy.weight(SignalKind.LABEL_VALUE_CONTAINS),
                    reason=f"Resource has label '{key}' with value containing {subject}",
                )
            )

    for_provider = resource.for_provider
    spec_labels = for_provider.get("labels").string_map()
    for key in policy.well_known_labels:
        if spec_labels.get(key) == target:
            signals.append(
                Signal(
                    kind=SignalKind.SPEC_LABEL_EXACT,
                    weight=policy.label_weight(key),
                    reason=f"Resource spec has '{key}' label in forProvider.labels",
                )
            )

    for key, child in for_provider.items():
        value = child.as_str()
        if value is not None and needle in value.lower():
            signals.append(
                Signal(
                    kind=SignalKind.FIELD_CONTAINS,
                    weight=policy.weight(SignalKind.FIELD_CONTAINS),
                    reason=f"Resource spec.forProvider.{key} contains {subject}",
                )
            )

    return signals
