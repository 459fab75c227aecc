"""
CLI command for applying labels to a single managed resource.

Commands:
    crosstag apply <Kind/name> --label key=value   - Merge labels into one resource
"""

from __future__ import annotations

import argparse
from typing import Optional

from crosstag.cli.context import build_store
from crosstag.cli.ux import console, success
from crosstag.core.errors import (
    ConfigurationError,
    ExitCode,
    ResourceNotFound,
    main_with_error_handling,
)
from crosstag.labels.applier import LabelApplier
from crosstag.resources.catalog import list_resource_types
from crosstag.resources.models import ManagedResource, ResourceIdentifier, plural_for_kind
from crosstag.resources.store import ResourceStore


def parse_label_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse key=value arguments into a label mapping."""
    labels: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Invalid label '{pair}', expected key=value")
        labels[key] = value
    return labels


def parse_resource_ref(ref: str) -> tuple[str, str]:
    """Split a Kind/name reference."""
    kind, sep, name = ref.partition("/")
    if not sep or not kind or not name:
        raise ConfigurationError(f"Invalid resource reference '{ref}', expected Kind/name")
    return kind, name


def find_resource(
    store: ResourceStore,
    kind: str,
    name: str,
    group: Optional[str] = None,
) -> ManagedResource:
    """
    Look a resource up by kind and name across the watched types.

    Several provider families share a plural (redis, spanner and bigtable
    all have ``instances``), so a name found in more than one of them must
    be disambiguated with a group.

    Raises:
        ResourceNotFound: if no watched type holds the resource
        ConfigurationError: if the reference is ambiguous
    """
    plural = plural_for_kind(kind)
    candidates = [
        t for t in list_resource_types() if t.plural == plural and (group is None or t.group == group)
    ]

    found: list[ManagedResource] = []
    for descriptor in candidates:
        identifier = ResourceIdentifier(
            kind=kind,
            name=name,
            group=descriptor.group,
            version=descriptor.version,
            plural=descriptor.plural,
        )
        try:
            found.append(store.get(identifier))
        except ResourceNotFound:
            continue

    if not found:
        raise ResourceNotFound(f"{kind}/{name} not found", {"target": f"{kind}/{name}"})

    groups = sorted({r.group for r in found})
    if len(groups) > 1:
        raise ConfigurationError(
            f"{kind}/{name} exists in several groups, pass --group",
            {"groups": ", ".join(groups)},
        )
    return found[0]


@main_with_error_handling()
def apply_command(
    resource_ref: str,
    label_pairs: list[str],
    group: Optional[str] = None,
    dry_run: bool = False,
    output_format: str = "table",
    resources_file: Optional[str] = None,
) -> int:
    """
    Merge labels into one managed resource.

    Exit codes:
        0 - Labels applied (or already present)
        10 - Bad arguments
        11 - Resource missing, conflict or API failure

    Args:
        resource_ref: Kind/name of the resource
        label_pairs: key=value labels to set
        group: API group, when the kind/name is ambiguous
        dry_run: Show the changes without writing
        output_format: Output format ("table" or "json")
        resources_file: Serve resources from this YAML file
    """
    kind, name = parse_resource_ref(resource_ref)
    desired = parse_label_pairs(label_pairs)
    if not desired:
        raise ConfigurationError("At least one --label is required")

    store = build_store(resources_file=resources_file)
    resource = find_resource(store, kind, name, group=group)
    applier = LabelApplier(store=store)

    changes = applier.plan(resource, desired)
    written = False
    if changes and not dry_run:
        written = applier.apply(resource, desired)

    if output_format == "json":
        console.print_json(
            data={
                "resource": resource.key,
                "changes": changes,
                "written": written,
                "dry_run": dry_run,
            }
        )
        return ExitCode.SUCCESS

    console.print()
    if not changes:
        success(f"{resource.key} already has the requested labels")
    elif dry_run:
        console.print(f"[bold]Would update[/bold] [cyan]{resource.key}[/cyan]:")
        for key, value in sorted(changes.items()):
            console.print(f"  {key}: {value}")
    else:
        success(f"Updated {resource.key}: {', '.join(sorted(changes))}")
    console.print()
    return ExitCode.SUCCESS


def register_apply_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register apply subcommand parser."""
    apply_parser = subparsers.add_parser(
        "apply",
        help="Merge labels into one managed resource",
    )
    apply_parser.add_argument("resource_ref", help="Resource as Kind/name (e.g. Bucket/billing-data)")
    apply_parser.add_argument(
        "--label",
        "-l",
        dest="label_pairs",
        action="append",
        default=[],
        help="Label to set as key=value (repeatable)",
    )
    apply_parser.add_argument("--group", help="API group, e.g. redis.gcp.upbound.io")
    apply_parser.add_argument("--dry-run", action="store_true", help="Show changes without writing")
    apply_parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
