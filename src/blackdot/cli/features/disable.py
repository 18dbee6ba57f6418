"""
Blackdot features disable command.

SUMMARY: Disable a feature

Core features cannot be disabled. Features that depend on the disabled one
are left as they are.
"""

from __future__ import annotations

import argparse

from blackdot.cli import (
    OutputFormatter,
    add_feature_name_arg,
    add_json_flag,
    add_persist_flags,
    build_resolver,
)
from blackdot.core.exceptions import BlackdotError

SUMMARY = "Disable a feature"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_feature_name_arg(parser, "Feature to disable")
    add_persist_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        resolver.disable(args.name)

        still_on = [d for d in resolver.dependents(args.name) if resolver.enabled(d)]
        persisted = resolver.persist(args.layer) if args.persist else None

        lines = []
        if persisted is not None:
            lines.append(f"✓ Feature '{args.name}' disabled and saved to {persisted}")
        else:
            lines.append(f"✓ Feature '{args.name}' disabled (runtime only)")
            lines.append("  Use --persist to save to config file")
        if still_on:
            lines.append(f"  Note: still enabled and depending on it: {', '.join(still_on)}")

        formatter.success(
            {
                "feature": args.name,
                "enabled": False,
                "enabled_dependents": still_on,
                "persisted": str(persisted) if persisted is not None else None,
            },
            "\n".join(lines),
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="features_disable_error")
        return 1
