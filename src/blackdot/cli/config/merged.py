"""
Blackdot config merged command.

SUMMARY: Show the merged config from all file layers

Layers merge as user < machine < project; environment values are not
included.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, build_store
from blackdot.core.exceptions import BlackdotError
from blackdot.core.utils.io import dump_yaml_string

SUMMARY = "Show the merged config from all file layers"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Output format (default: json)",
    )


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.format == "json")

    try:
        merged = build_store().merged()
        if args.format == "yaml":
            formatter.text(dump_yaml_string(merged).rstrip() if merged else "{}")
        else:
            formatter.json_output(merged)
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_merged_error")
        return 1
