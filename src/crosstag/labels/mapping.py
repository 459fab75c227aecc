"""
Label mapping: derive the labels to apply from a workload's own labels.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LabelMapping(BaseModel):
    """Copy one workload label onto managed resources, optionally renamed."""

    source: str = Field(..., description="Label key read from the pod")
    target: Optional[str] = Field(None, description="Label key written to the resource (defaults to source)")
    default: Optional[str] = Field(None, description="Value used when the pod lacks the source label")

    @property
    def target_key(self) -> str:
        return self.target or self.source


def resolve_desired_labels(
    static_labels: dict[str, str],
    mappings: list[LabelMapping],
    workload_labels: dict[str, str] | None = None,
) -> dict[str, str]:
    """
    Build the label set for one workload.

    Static labels come first; mapped labels override them. Labels whose
    value ends up empty are dropped, since an empty label carries no
    attribution.
    """
    workload_labels = workload_labels or {}
    desired = dict(static_labels)

    for mapping in mappings:
        value = workload_labels.get(mapping.source) or mapping.default
        if value:
            desired[mapping.target_key] = value

    return {k: v for k, v in desired.items() if v}
