"""
Idempotent label application to managed resources.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from crosstag.resources.models import ManagedResource
from crosstag.resources.store import ResourceStore

logger = structlog.get_logger()


def label_changes(current: dict[str, str], desired: dict[str, str]) -> dict[str, str]:
    """Desired entries that are missing from, or differ in, current."""
    return {k: v for k, v in desired.items() if current.get(k) != v}


@dataclass
class LabelApplier:
    """
    Merges labels into managed resources.

    The resource is re-read immediately before writing so concurrent edits
    are not clobbered, and the write carries the fresh resourceVersion so a
    racing writer makes it fail with ResourceConflict instead of being lost.
    No write happens when every desired label is already present.
    """

    store: ResourceStore

    def plan(self, resource: ManagedResource, desired: dict[str, str]) -> dict[str, str]:
        """
        Compute the label changes apply() would make, without writing.

        Raises:
            ResourceNotFound: if the resource no longer exists
            BackendUnavailable: if it cannot be read
        """
        current = self.store.get(resource.identifier())
        return label_changes(current.labels, desired)

    def apply(self, resource: ManagedResource, desired: dict[str, str]) -> bool:
        """
        Merge desired labels into the resource's persisted labels.

        Args:
            resource: Resource to label (only its identity is used)
            desired: Labels to set; they win over existing values

        Returns:
            True if the resource was written, False if nothing changed

        Raises:
            ResourceNotFound: if the resource vanished
            ResourceConflict: if it changed between read and write
            BackendUnavailable: on any other store failure
        """
        current = self.store.get(resource.identifier())
        changes = label_changes(current.labels, desired)

        if not changes:
            logger.debug("no_label_changes_needed", resource=resource.key)
            return False

        merged = {**current.labels, **changes}
        self.store.update(current.with_labels(merged))

        logger.info("resource_labels_updated", resource=resource.key, changed=sorted(changes))
        return True
