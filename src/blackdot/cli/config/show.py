"""
Blackdot config show command.

SUMMARY: Show a key's value in every layer

The layer that supplies the effective value is marked with an arrow.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_store, warnings_payload
from blackdot.core.config import value_to_str
from blackdot.core.exceptions import BlackdotError

SUMMARY = "Show a key's value in every layer"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("key", help="Dotted config key (e.g., 'vault.backend')")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        store = build_store()
        rows = store.layer_values(args.key)
        result = store.get_layered(args.key)

        if args.json:
            formatter.json_output(
                {
                    "key": args.key,
                    "value": result.value,
                    "source": result.source.value,
                    "layers": [row.to_dict() for row in rows],
                    "warnings": warnings_payload(store),
                }
            )
            return 0

        formatter.text(f"Config: {args.key}")
        formatter.text("=" * 60)
        for row in rows:
            marker = "→" if row.active else " "
            if row.present:
                shown = value_to_str(row.value)
            else:
                shown = f"(not set{': ' + row.note if row.note else ''})"
            where = f"  [{row.origin}]" if row.origin else ""
            formatter.text(f"{marker} {row.layer.value:<8} {shown}{where}")
        formatter.text("")
        formatter.text(f"Effective: {result.as_str() or '(empty)'} (from {result.source.value})")
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_show_error")
        return 1
