from __future__ import annotations

import argparse
import sys
from typing import Sequence

from crosstag import __version__
from crosstag.cli.apply import register_apply_parser
from crosstag.cli.reconcile import register_reconcile_parser
from crosstag.cli.resolve import register_resolve_parsers
from crosstag.config.settings import get_settings
from crosstag.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crosstag",
        description="Attribute Crossplane managed resources to the workloads that use them",
    )
    parser.add_argument("--version", action="version", version=f"crosstag {__version__}")
    parser.add_argument(
        "--resources-file",
        help="Read managed resources from a YAML file instead of the cluster",
    )
    parser.add_argument("--log-level", help="Log level (default: CROSSTAG_LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command")
    register_resolve_parsers(subparsers)
    register_apply_parser(subparsers)
    register_reconcile_parser(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_format)

    if args.command == "resolve":
        from crosstag.cli.resolve import resolve_command

        sys.exit(
            resolve_command(
                target=args.target,
                addresses=args.addresses,
                workload=args.workload,
                output_format=args.output_format,
                resources_file=args.resources_file,
            )
        )

    if args.command == "resource-types":
        from crosstag.cli.resolve import resource_types_command

        sys.exit(resource_types_command(output_format=args.output_format))

    if args.command == "addresses":
        from crosstag.cli.resolve import addresses_command

        sys.exit(
            addresses_command(
                output_format=args.output_format,
                resources_file=args.resources_file,
            )
        )

    if args.command == "apply":
        from crosstag.cli.apply import apply_command

        sys.exit(
            apply_command(
                resource_ref=args.resource_ref,
                label_pairs=args.label_pairs,
                group=args.group,
                dry_run=args.dry_run,
                output_format=args.output_format,
                resources_file=args.resources_file,
            )
        )

    if args.command == "reconcile":
        from crosstag.cli.reconcile import reconcile_command

        sys.exit(
            reconcile_command(
                labeller_file=args.labeller_file,
                once=args.once,
                passes=args.passes,
                dry_run=args.dry_run,
                output_format=args.output_format,
                resources_file=args.resources_file,
                workloads_file=args.workloads_file,
            )
        )

    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
