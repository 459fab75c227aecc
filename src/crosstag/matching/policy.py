"""
Scoring policy: the weight each identity signal contributes.

Weights are data, not constants, so a labeller definition can tune them
without a code change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from crosstag.core.errors import ConfigurationError


class SignalKind(str, Enum):
    """Kinds of identity evidence, strongest first."""

    LABEL_EXACT = "label_exact"  # well-known label equals the target (per-key weight)
    SPEC_LABEL_EXACT = "spec_label_exact"  # same, inside spec.forProvider.labels
    NAME_CONTAINS = "name_contains"  # resource name contains the target (0.8)
    LABEL_VALUE_CONTAINS = "label_value_contains"  # any other label value contains it (0.6)
    FIELD_CONTAINS = "field_contains"  # a spec.forProvider string contains it (0.5)


# Weights for kinds that do not depend on a label key
DEFAULT_WEIGHTS: dict[SignalKind, float] = {
    SignalKind.NAME_CONTAINS: 0.8,
    SignalKind.LABEL_VALUE_CONTAINS: 0.6,
    SignalKind.FIELD_CONTAINS: 0.5,
}

# Well-known label keys checked for an exact match, with their weights
DEFAULT_LABEL_WEIGHTS: dict[str, float] = {
    "kubernetes-namespace": 0.9,
    "namespace": 0.9,
    "workload-name": 0.9,
    "app": 0.9,
    "environment": 0.7,
}


@dataclass
class ScoringPolicy:
    """Signal weights used by the extractor and scorer."""

    weights: dict[SignalKind, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    label_weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_LABEL_WEIGHTS))

    def weight(self, kind: SignalKind) -> float:
        return self.weights.get(kind, 0.0)

    def label_weight(self, key: str) -> float:
        return self.label_weights.get(key, 0.0)

    @property
    def well_known_labels(self) -> list[str]:
        return list(self.label_weights)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ScoringPolicy:
        """
        Build a policy from a mapping, starting from the defaults.

        Example:
            {"weights": {"name_contains": 0.7}, "label_weights": {"team": 0.6}}
        """
        policy = cls()
        if not data:
            return policy

        for raw_kind, value in (data.get("weights") or {}).items():
            try:
                kind = SignalKind(raw_kind)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown signal kind: {raw_kind}",
                    {"valid": [k.value for k in SignalKind]},
                ) from e
            policy.weights[kind] = _checked_weight(raw_kind, value)

        for key, value in (data.get("label_weights") or {}).items():
            policy.label_weights[str(key)] = _checked_weight(key, value)

        return policy

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "weights": {kind.value: weight for kind, weight in self.weights.items()},
            "label_weights": dict(self.label_weights),
        }


def _checked_weight(name: str, value: Any) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Weight for {name} is not a number: {value!r}") from e
    if not 0.0 <= weight <= 1.0:
        raise ConfigurationError(f"Weight for {name} must be between 0 and 1, got {weight}")
    return weight
