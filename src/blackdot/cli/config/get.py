"""
Blackdot config get command.

SUMMARY: Get a config value with layered resolution

Resolution order: env > project > machine > user > default. With --direct
only the user config file is read.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_store, warnings_payload
from blackdot.core.config import value_to_str
from blackdot.core.exceptions import BlackdotError, ConfigKeyNotFoundError

SUMMARY = "Get a config value with layered resolution"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("key", help="Dotted config key (e.g., 'vault.backend')")
    parser.add_argument("default", nargs="?", help="Value to print when nothing resolves")
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Read the user config file only, without layering",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        store = build_store()

        if args.direct:
            try:
                value = store.get(args.key)
                source = "user"
            except ConfigKeyNotFoundError:
                if args.default is None:
                    raise
                value, source = args.default, "default"
            if args.json:
                formatter.json_output({"key": args.key, "value": value, "source": source})
            else:
                formatter.text(value_to_str(value))
            return 0

        result = store.get_layered(args.key)
        value = result.value if result.found or args.default is None else args.default

        if args.json:
            payload = {**result.to_dict(), "value": value}
            warnings = warnings_payload(store)
            if warnings:
                payload["warnings"] = warnings
            formatter.json_output(payload)
        else:
            formatter.text(value_to_str(value))
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_get_error")
        return 1
