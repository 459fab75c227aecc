"""
CLI command for running a labeller.

Commands:
    crosstag reconcile <labeller.yaml>          - Run passes on the labeller's interval
    crosstag reconcile <labeller.yaml> --once   - Run a single pass
"""

from __future__ import annotations

import argparse
from typing import Optional

from crosstag.cli.context import build_resolver, build_store, build_workloads
from crosstag.cli.ux import console, error, header, success, warning
from crosstag.config.settings import get_settings
from crosstag.core.errors import ExitCode, main_with_error_handling
from crosstag.labeller.reconciler import LabellerReconciler, PassResult
from crosstag.labeller.spec import load_labeller
from crosstag.labels.applier import LabelApplier


@main_with_error_handling()
def reconcile_command(
    labeller_file: str,
    once: bool = False,
    passes: Optional[int] = None,
    dry_run: bool = False,
    output_format: str = "table",
    resources_file: Optional[str] = None,
    workloads_file: Optional[str] = None,
) -> int:
    """
    Run a labeller against the cluster.

    Exit codes:
        0 - Every pass finished without labelling errors
        1 - A pass finished with labelling errors
        10 - Invalid labeller file or selector
        11 - Workloads could not be listed

    Args:
        labeller_file: Path to the labeller YAML
        once: Run a single pass and exit
        passes: Stop after this many passes
        dry_run: Plan label changes without writing
        output_format: Output format ("table" or "json")
        resources_file: Serve resources from this YAML file
        workloads_file: Serve namespaces and pods from this YAML file
    """
    settings = get_settings()
    spec = load_labeller(labeller_file)

    store = build_store(settings, resources_file=resources_file)
    reconciler = LabellerReconciler(
        workloads=build_workloads(settings, workloads_file=workloads_file),
        resolver=build_resolver(store, settings),
        applier=LabelApplier(store=store),
    )

    if once:
        results = [reconciler.run_pass(spec, dry_run=dry_run)]
    else:
        results = reconciler.run_forever(
            lambda: load_labeller(labeller_file),
            passes=passes,
            dry_run=dry_run,
            default_interval=settings.reconcile_interval_seconds,
        )

    if output_format == "json":
        console.print_json(
            data={
                "passes": [r.to_dict() for r in results],
                "status": reconciler.status.to_dict(),
            }
        )
    else:
        for result in results:
            _print_pass(result)

    if not results:
        return ExitCode.WARNING
    return ExitCode.SUCCESS if all(r.ok for r in results) else ExitCode.WARNING


def _print_pass(result: PassResult) -> None:
    header(f"Labeller: {result.labeller}" + (" (dry run)" if result.dry_run else ""))
    console.print(f"[bold]Pods:[/bold] {result.pods}")
    verb = "Would label" if result.dry_run else "Labeled"
    console.print(f"[bold]{verb}:[/bold] {result.resources_labeled}")
    console.print(f"[bold]Unchanged:[/bold] {result.resources_unchanged}")

    for key, changes in sorted(result.planned.items()):
        rendered = ", ".join(f"{k}={v}" for k, v in sorted(changes.items()))
        console.print(f"  [cyan]{key}[/cyan]: {rendered}")

    console.print()
    if result.errors:
        warning(f"{len(result.errors)} resources could not be labeled")
        for message in result.errors:
            error(message)
    else:
        success("Pass completed without errors")
    console.print()


def register_reconcile_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register reconcile subcommand parser."""
    reconcile_parser = subparsers.add_parser(
        "reconcile",
        help="Propagate workload labels to managed resources",
    )
    reconcile_parser.add_argument("labeller_file", help="Path to labeller YAML")
    reconcile_parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    reconcile_parser.add_argument("--passes", type=int, help="Stop after this many passes")
    reconcile_parser.add_argument("--dry-run", action="store_true", help="Show changes without writing")
    reconcile_parser.add_argument(
        "--workloads-file",
        help="Read namespaces and pods from a YAML file instead of the cluster",
    )
    reconcile_parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
