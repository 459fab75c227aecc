"""
Labeller reconciliation.

One pass selects namespaces and pods, resolves each pod's managed resources
and applies the labeller's labels to them. Per-resource failures are
recorded and the pass continues; an invalid selector aborts the pass before
any label is written.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from crosstag.core.errors import CrosstagError, InvalidPattern, ProviderError
from crosstag.labeller.selectors import compile_pattern, filter_names
from crosstag.labeller.spec import LabellerSpec, TargetKind
from crosstag.labeller.workloads import PodInfo, WorkloadSource
from crosstag.labels.applier import LabelApplier
from crosstag.labels.mapping import resolve_desired_labels
from crosstag.logging import bind_context
from crosstag.matching.resolver import MatchResolver

logger = structlog.get_logger()

# Errors quoted verbatim in the LabelingErrors condition
MAX_REPORTED_ERRORS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Condition:
    """A status condition, shaped like metav1.Condition."""

    type: str
    status: bool
    reason: str
    message: str
    last_transition_time: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.type,
            "status": "True" if self.status else "False",
            "reason": self.reason,
            "message": self.message,
            "lastTransitionTime": self.last_transition_time.isoformat(),
        }


def set_condition(
    conditions: list[Condition],
    type: str,
    status: bool,
    reason: str,
    message: str,
    now: datetime | None = None,
) -> None:
    """
    Add or update a condition in place.

    An existing condition is only replaced when its status, reason or
    message changes, so lastTransitionTime reflects real transitions.
    """
    new = Condition(type=type, status=status, reason=reason, message=message, last_transition_time=now or _utcnow())

    for i, existing in enumerate(conditions):
        if existing.type != type:
            continue
        if (existing.status, existing.reason, existing.message) != (status, reason, message):
            conditions[i] = new
        return

    conditions.append(new)


@dataclass
class LabellerStatus:
    """Observed state of a labeller, carried across passes."""

    last_reconcile_time: datetime | None = None
    resources_labeled: int = 0
    conditions: list[Condition] = field(default_factory=list)

    def condition(self, type: str) -> Condition | None:
        return next((c for c in self.conditions if c.type == type), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "lastReconcileTime": self.last_reconcile_time.isoformat() if self.last_reconcile_time else None,
            "resourcesLabeled": self.resources_labeled,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass
class PassResult:
    """Outcome of one reconciliation pass."""

    labeller: str
    pods: int = 0
    resources_labeled: int = 0
    resources_unchanged: int = 0
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False
    planned: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def resources_applied(self) -> int:
        """Resources whose labels were applied without error, changed or not."""
        return self.resources_labeled + self.resources_unchanged

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "labeller": self.labeller,
            "pods": self.pods,
            "resources_labeled": self.resources_labeled,
            "resources_unchanged": self.resources_unchanged,
            "resources_applied": self.resources_applied,
            "errors": list(self.errors),
            "dry_run": self.dry_run,
            "planned": self.planned,
        }


def summarize_errors(errors: list[str]) -> str:
    if len(errors) <= MAX_REPORTED_ERRORS:
        return f"Errors: {'; '.join(errors)}"
    shown = "; ".join(errors[:MAX_REPORTED_ERRORS])
    return f"{len(errors)} errors occurred, first {MAX_REPORTED_ERRORS}: {shown}"


@dataclass
class LabellerReconciler:
    """
    Runs labeller passes against a workload source and a resource resolver.

    Attributes:
        workloads: Namespace and pod source
        resolver: Resolves pods to managed resources
        applier: Writes labels
        status: Observed state, updated by every pass
    """

    workloads: WorkloadSource
    resolver: MatchResolver
    applier: LabelApplier
    status: LabellerStatus = field(default_factory=LabellerStatus)
    clock: Callable[[], datetime] = _utcnow

    def select_pods(self, spec: LabellerSpec) -> list[PodInfo]:
        """
        Pods selected by the labeller's namespace and pod selectors.

        Raises:
            InvalidPattern: if either selector is not a valid regex
            BackendUnavailable: if namespaces or pods cannot be listed
        """
        # Both patterns are compiled before anything is listed or written
        namespace_pattern = compile_pattern(spec.namespace_selector)
        pod_pattern = compile_pattern(spec.pod_selector)

        namespaces = filter_names(self.workloads.list_namespaces(), namespace_pattern)
        logger.info("matched_namespaces", labeller=spec.name, count=len(namespaces))

        pods: list[PodInfo] = []
        for namespace in namespaces:
            candidates = self.workloads.list_pods(namespace)
            selected = set(filter_names([p.name for p in candidates], pod_pattern))
            pods.extend(p for p in candidates if p.name in selected)

        logger.info("matched_pods", labeller=spec.name, count=len(pods))
        return pods

    def run_pass(self, spec: LabellerSpec, dry_run: bool = False) -> PassResult:
        """
        Run one reconciliation pass.

        Raises:
            InvalidPattern: selector misconfiguration (no labels are written)
            BackendUnavailable: namespaces or pods could not be listed
        """
        log = bind_context(labeller=spec.name)
        now = self.clock()
        result = PassResult(labeller=spec.name, dry_run=dry_run)

        try:
            pods = self.select_pods(spec)
        except InvalidPattern as e:
            set_condition(self.status.conditions, "Ready", False, "InvalidSelector", e.message, now)
            raise
        except ProviderError as e:
            set_condition(self.status.conditions, "Ready", False, "WorkloadsFetchFailed", e.message, now)
            raise

        result.pods = len(pods)
        self.resolver.scorer.policy = spec.scoring_policy()

        for pod in pods:
            self._reconcile_pod(spec, pod, result, dry_run, log)

        self._update_status(result, now)
        log.info(
            "reconciliation_completed",
            resources_labeled=result.resources_labeled,
            resources_unchanged=result.resources_unchanged,
            errors=len(result.errors),
            next_reconcile_in=spec.interval_seconds,
        )
        return result

    def _reconcile_pod(
        self,
        spec: LabellerSpec,
        pod: PodInfo,
        result: PassResult,
        dry_run: bool,
        log: Any,
    ) -> None:
        if spec.target is TargetKind.WORKLOAD:
            target, subject = pod.workload_name, "workload"
        else:
            target, subject = pod.namespace, "namespace"

        desired = resolve_desired_labels(spec.labels, spec.label_mappings, pod.labels)
        if spec.target is TargetKind.WORKLOAD:
            desired.setdefault("workload-name", target)
        if not desired:
            log.debug("no_labels_for_pod", pod=pod.name, namespace=pod.namespace)
            return

        addresses = pod.ips if spec.use_network else []
        try:
            matches = self.resolver.resolve_by_name_with_network(target, addresses, subject=subject)
        except CrosstagError as e:
            result.errors.append(f"Pod {pod.namespace}/{pod.name}: {e.message}")
            log.error("resource_resolution_failed", pod=pod.name, namespace=pod.namespace, error=e.message)
            return

        for match in matches:
            try:
                if dry_run:
                    changes = self.applier.plan(match.resource, desired)
                    if changes:
                        result.planned[match.key] = changes
                    changed = bool(changes)
                else:
                    changed = self.applier.apply(match.resource, desired)
            except ProviderError as e:
                result.errors.append(f"Resource {match.key}: {e.message}")
                log.error("label_apply_failed", resource=match.key, error=e.message)
                continue

            if changed:
                result.resources_labeled += 1
                log.info(
                    "labels_applied" if not dry_run else "labels_planned",
                    resource=match.key,
                    confidence=round(match.confidence, 4),
                    match_reasons=match.reasons,
                )
            else:
                result.resources_unchanged += 1

    def _update_status(self, result: PassResult, now: datetime) -> None:
        status = self.status
        status.last_reconcile_time = now
        status.resources_labeled = result.resources_applied

        set_condition(
            status.conditions,
            "Ready",
            True,
            "ReconciliationSucceeded",
            f"Successfully labeled {result.resources_applied} resources",
            now,
        )
        if result.errors:
            set_condition(
                status.conditions,
                "LabelingErrors",
                True,
                "ResourceLabelingPartiallyFailed",
                summarize_errors(result.errors),
                now,
            )
        else:
            set_condition(
                status.conditions,
                "LabelingErrors",
                False,
                "NoErrors",
                "All resources successfully labeled",
                now,
            )

    def run_forever(
        self,
        load_spec: Callable[[], LabellerSpec],
        passes: int | None = None,
        dry_run: bool = False,
        default_interval: float = 300,
        sleep: Callable[[float], None] = time.sleep,
    ) -> list[PassResult]:
        """
        Run passes on the labeller's interval.

        The definition is reloaded before each pass so edits take effect
        without a restart. A failing pass is logged and the next one is
        still scheduled.

        Args:
            load_spec: Returns the current labeller definition
            passes: Stop after this many passes (None runs until interrupted)
            dry_run: Plan label changes without writing
            default_interval: Seconds between passes until a definition loads
            sleep: Sleep function, replaceable in tests
        """
        results: list[PassResult] = []
        interval = default_interval
        count = 0

        while passes is None or count < passes:
            if count:
                sleep(interval)
            count += 1

            try:
                spec = load_spec()
                interval = spec.interval_seconds
                results.append(self.run_pass(spec, dry_run=dry_run))
            except CrosstagError as e:
                logger.error("reconciliation_failed", error_type=type(e).__name__, message=e.message, **e.details)

        return results
