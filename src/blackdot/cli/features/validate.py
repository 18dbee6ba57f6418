"""
Blackdot features validate command.

SUMMARY: Validate feature dependencies and conflicts

Reports circular or unknown dependencies in the catalog and conflicting
features that are enabled together.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_resolver
from blackdot.core.exceptions import BlackdotError

SUMMARY = "Validate feature dependencies and conflicts"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        problems = resolver.problems()
    except BlackdotError as e:
        formatter.error(e, error_code="features_validate_error")
        return 1

    if args.json:
        formatter.json_output(
            {
                "valid": not problems,
                "problems": [p.to_json_error() for p in problems],
            }
        )
        return 0 if not problems else 1

    formatter.text("Feature Registry Validation")
    formatter.text("=" * 60)
    if not problems:
        formatter.text("✓ Registry is valid - no circular dependencies or conflicts")
        return 0

    formatter.text(f"Validation failed ({len(problems)} problem(s)):")
    for problem in problems:
        formatter.text(f"  - {problem}")
    return 1
