"""
Labeller definitions.

A labeller says which workloads to look at, which labels to propagate to
their managed resources, and how often. Definitions are YAML, either flat
or shaped like a Kubernetes object with the settings under ``spec``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from crosstag.core.errors import ConfigurationError
from crosstag.labels.mapping import LabelMapping
from crosstag.matching.policy import ScoringPolicy

logger = structlog.get_logger()

DEFAULT_INTERVAL_SECONDS = 300


class TargetKind(str, Enum):
    """What a pod is matched by."""

    NAMESPACE = "namespace"  # the pod's namespace name
    WORKLOAD = "workload"  # the pod's workload-name label, else the pod name


class LabellerSpec(BaseModel):
    """Desired labelling behaviour."""

    name: str = Field("default", description="Labeller name, used in logs")
    namespace_selector: Optional[str] = Field(
        None, alias="namespaceSelector", description="Regex matched against namespace names"
    )
    pod_selector: Optional[str] = Field(None, alias="podSelector", description="Regex matched against pod names")
    target: TargetKind = Field(TargetKind.NAMESPACE, description="Match resources by namespace or workload")
    labels: Dict[str, str] = Field(default_factory=dict, description="Labels applied to every matched resource")
    label_mappings: List[LabelMapping] = Field(
        default_factory=list, alias="labelMappings", description="Pod labels copied to matched resources"
    )
    interval_seconds: int = Field(
        DEFAULT_INTERVAL_SECONDS, alias="intervalSeconds", gt=0, description="Seconds between passes"
    )
    use_network: bool = Field(True, alias="useNetwork", description="Add matches from pod IP evidence")
    scoring: Optional[Dict[str, Any]] = Field(None, description="Signal weight overrides")

    class Config:
        populate_by_name = True

    def scoring_policy(self) -> ScoringPolicy:
        return ScoringPolicy.from_dict(self.scoring)


def parse_labeller(data: dict[str, Any]) -> LabellerSpec:
    """Build a LabellerSpec from a flat mapping or a Kubernetes-style object."""
    if not isinstance(data, dict):
        raise ConfigurationError("Labeller definition must be a mapping")

    if isinstance(data.get("spec"), dict):
        body = dict(data["spec"])
        name = (data.get("metadata") or {}).get("name")
        if name and "name" not in body:
            body["name"] = name
    else:
        body = data

    try:
        return LabellerSpec.model_validate(body)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid labeller definition: {e}") from e


def load_labeller(path: str | Path) -> LabellerSpec:
    """Load a labeller definition from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read labeller file: {e}", {"path": str(path)}) from e

    spec = parse_labeller(data)
    logger.debug("loaded_labeller", path=str(path), name=spec.name)
    return spec
