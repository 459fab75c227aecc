"""
Label propagation to managed resources.
"""

from crosstag.labels.applier import LabelApplier, label_changes
from crosstag.labels.mapping import LabelMapping, resolve_desired_labels

__all__ = [
    "LabelApplier",
    "label_changes",
    "LabelMapping",
    "resolve_desired_labels",
]
