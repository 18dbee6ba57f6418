"""
Blackdot features check command.

SUMMARY: Check whether a feature is enabled (for scripts)

Exit status: 0 enabled, 1 disabled, 2 unknown feature.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_feature_name_arg, build_resolver
from blackdot.core.exceptions import UnknownFeatureError

SUMMARY = "Check whether a feature is enabled (for scripts)"

EXIT_ENABLED = 0
EXIT_DISABLED = 1
EXIT_UNKNOWN = 2


def register_args(parser: argparse.ArgumentParser) -> None:
    add_feature_name_arg(parser, "Feature to check")
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Print nothing; only set the exit status",
    )


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter()
    resolver = build_resolver()

    if args.name not in resolver.catalog:
        if not args.quiet:
            formatter.error(UnknownFeatureError(args.name))
        return EXIT_UNKNOWN

    if resolver.enabled(args.name):
        if not args.quiet:
            formatter.text(f"✓ Feature '{args.name}' is enabled")
        return EXIT_ENABLED

    if not args.quiet:
        formatter.text(f"Feature '{args.name}' is disabled")
    return EXIT_DISABLED
