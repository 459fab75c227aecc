"""
CLI commands for resource resolution.

Commands:
    crosstag resolve <target>      - Show resources that belong to a namespace or workload
    crosstag resource-types        - List the watched managed resource types
    crosstag addresses             - Show the IP address -> resource index
"""

from __future__ import annotations

import argparse
from typing import Optional

from rich.markup import escape

from crosstag.cli.context import build_resolver, build_store
from crosstag.cli.ux import confidence_style, console, header, print_table
from crosstag.core.errors import ExitCode, main_with_error_handling
from crosstag.resources.catalog import list_resource_types
from crosstag.resources.models import ResourceMatch

# --- Resolve subcommand ---


@main_with_error_handling()
def resolve_command(
    target: str,
    addresses: Optional[list[str]] = None,
    workload: bool = False,
    output_format: str = "table",
    resources_file: Optional[str] = None,
) -> int:
    """
    Resolve a namespace or workload name to its managed resources.

    Exit codes:
        0 - At least one resource matched
        1 - No match found
        10/11 - Configuration or provider error

    Args:
        target: Namespace or workload name
        addresses: Pod IPs used as network evidence
        workload: Treat the target as a workload name
        output_format: Output format ("table" or "json")
        resources_file: Serve resources from this YAML file

    Returns:
        Exit code
    """
    subject = "workload" if workload else "namespace"
    resolver = build_resolver(build_store(resources_file=resources_file))
    matches = resolver.resolve_by_name_with_network(target, addresses or [], subject=subject)

    if output_format == "json":
        console.print_json(
            data={
                "target": target,
                "subject": subject,
                "addresses": list(addresses or []),
                "matches": [m.to_dict() for m in matches],
            }
        )
    else:
        _print_resolve_output(target, subject, matches)

    return ExitCode.SUCCESS if matches else ExitCode.WARNING


def _print_resolve_output(target: str, subject: str, matches: list[ResourceMatch]) -> None:
    header(f"Resources for {subject}: {target}")
    console.print()

    if not matches:
        console.print("[warning]No matching resources found[/warning]")
        console.print()
        return

    rows = []
    for match in matches:
        style = confidence_style(match.confidence)
        rows.append(
            [
                f"[cyan]{escape(match.key)}[/cyan]",
                escape(match.resource.api_version),
                f"[{style}]{match.confidence:.2f}[/{style}]",
                match.source,
                escape("; ".join(match.reasons)),
            ]
        )

    print_table(None, ["Resource", "API Version", "Confidence", "Source", "Reasons"], rows)
    console.print()
    console.print(f"[muted]{len(matches)} resources matched[/muted]")
    console.print()


# --- Resource types subcommand ---


def resource_types_command(output_format: str = "table") -> int:
    """
    List the watched managed resource types.

    Exit codes:
        0 - Success
    """
    types = list_resource_types()

    if output_format == "json":
        console.print_json(
            data=[{"group": t.group, "version": t.version, "plural": t.plural} for t in types]
        )
        return ExitCode.SUCCESS

    header("Watched Resource Types")
    print_table(None, ["Group", "Version", "Plural"], [[t.group, t.version, t.plural] for t in types])
    console.print(f"[muted]{len(types)} resource types[/muted]")
    console.print()
    return ExitCode.SUCCESS


# --- Addresses subcommand ---


@main_with_error_handling()
def addresses_command(output_format: str = "table", resources_file: Optional[str] = None) -> int:
    """
    Build the network index and show which resources own which addresses.

    Exit codes:
        0 - Success
        11 - Provider error
    """
    resolver = build_resolver(build_store(resources_file=resources_file))
    assert resolver.network is not None
    index = resolver.network.rebuild()

    if output_format == "json":
        console.print_json(data=index.to_dict())
        return ExitCode.SUCCESS

    header("Network Index")
    entries = index.to_dict()
    if not entries:
        console.print("[muted]No addresses found on managed resources[/muted]")
        console.print()
        return ExitCode.SUCCESS

    print_table(None, ["Address", "Resources"], [[addr, ", ".join(keys)] for addr, keys in entries.items()])
    console.print(f"[muted]{len(entries)} addresses indexed[/muted]")
    console.print()
    return ExitCode.SUCCESS


# --- Parser registration ---


def _add_format_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def register_resolve_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register resolve, resource-types and addresses subcommands."""
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Show managed resources that belong to a namespace or workload",
    )
    resolve_parser.add_argument("target", help="Namespace (or workload) name")
    resolve_parser.add_argument(
        "--ip",
        dest="addresses",
        action="append",
        default=[],
        help="Pod IP used as network evidence (repeatable)",
    )
    resolve_parser.add_argument(
        "--workload",
        action="store_true",
        help="Treat the target as a workload name",
    )
    _add_format_argument(resolve_parser)

    types_parser = subparsers.add_parser(
        "resource-types",
        help="List the watched managed resource types",
    )
    _add_format_argument(types_parser)

    addresses_parser = subparsers.add_parser(
        "addresses",
        help="Show the IP address index of managed resources",
    )
    _add_format_argument(addresses_parser)
