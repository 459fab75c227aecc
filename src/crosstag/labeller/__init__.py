"""
Labeller: periodic propagation of workload labels to managed resources.
"""

from crosstag.labeller.reconciler import (
    Condition,
    LabellerReconciler,
    LabellerStatus,
    PassResult,
    set_condition,
)
from crosstag.labeller.selectors import compile_pattern, filter_names
from crosstag.labeller.spec import LabellerSpec, TargetKind, load_labeller, parse_labeller
from crosstag.labeller.workloads import (
    InMemoryWorkloadSource,
    KubernetesWorkloadSource,
    PodInfo,
    WorkloadSource,
)

__all__ = [
    # Definitions
    "LabellerSpec",
    "TargetKind",
    "load_labeller",
    "parse_labeller",
    # Selectors
    "compile_pattern",
    "filter_names",
    # Workloads
    "PodInfo",
    "WorkloadSource",
    "KubernetesWorkloadSource",
    "InMemoryWorkloadSource",
    # Reconciliation
    "Condition",
    "LabellerStatus",
    "PassResult",
    "LabellerReconciler",
    "set_condition",
]
