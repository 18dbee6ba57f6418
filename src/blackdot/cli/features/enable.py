"""
Blackdot features enable command.

SUMMARY: Enable a feature and its dependencies

Changes are runtime-only unless --persist is given.
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
from blackdot.core.exceptions import BlackdotError, UnknownFeatureError

SUMMARY = "Enable a feature and its dependencies"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_feature_name_arg(parser, "Feature to enable")
    add_persist_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        feature = resolver.catalog.get(args.name)
        if feature is None:
            raise UnknownFeatureError(args.name)

        if feature.is_core:
            formatter.success(
                {"feature": args.name, "enabled": True, "core": True, "enabled_dependencies": []},
                f"Feature '{args.name}' is a core feature (always enabled)",
            )
            return 0

        plan = resolver.enable(args.name)
        deps = [name for name in plan if name != args.name]

        persisted = resolver.persist(args.layer) if args.persist else None

        lines = []
        if deps:
            lines.append(f"Enabling dependencies first: {', '.join(deps)}")
        if persisted is not None:
            lines.append(f"✓ Feature '{args.name}' enabled and saved to {persisted}")
        else:
            lines.append(f"✓ Feature '{args.name}' enabled (runtime only)")
            lines.append("  Use --persist to save to config file")

        formatter.success(
            {
                "feature": args.name,
                "enabled": True,
                "enabled_dependencies": deps,
                "persisted": str(persisted) if persisted is not None else None,
            },
            "\n".join(lines),
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="features_enable_error")
        return 1
