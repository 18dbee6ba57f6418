"""
Blackdot features preset command.

SUMMARY: List presets or apply one

With no name (or --list) the available presets are printed. Applying a
preset first resets every non-core feature to its catalog default.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, add_persist_flags, build_resolver
from blackdot.core.exceptions import BlackdotError

SUMMARY = "List presets or apply one"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", nargs="?", help="Preset to apply")
    parser.add_argument(
        "--list",
        "-l",
        dest="list_presets",
        action="store_true",
        help="List available presets",
    )
    add_persist_flags(parser)
    add_json_flag(parser)


def _list(formatter: OutputFormatter, resolver) -> int:
    presets = resolver.presets.all()
    if formatter.json_mode:
        formatter.json_output([p.to_dict() for p in presets])
        return 0
    formatter.text("Available Presets")
    formatter.text("=" * 60)
    for preset in presets:
        formatter.text(f"  {preset.name:<12} {preset.description}")
        formatter.text(f"               {', '.join(preset.features)}")
    formatter.text("")
    formatter.text("Use 'blackdot features preset <name>' to apply a preset")
    return 0


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        if args.list_presets or not args.name:
            return _list(formatter, resolver)

        applied = resolver.apply_preset(args.name)
        persisted = resolver.persist(args.layer) if args.persist else None

        if persisted is not None:
            message = f"✓ Preset '{args.name}' applied and saved to {persisted}"
        else:
            message = f"✓ Preset '{args.name}' applied (runtime only)\n  Use --persist to save to config file"
        formatter.success(
            {
                "preset": args.name,
                "features": applied,
                "enabled": resolver.enabled_features(),
                "persisted": str(persisted) if persisted is not None else None,
            },
            message,
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="features_preset_error")
        return 1
