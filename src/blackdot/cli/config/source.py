"""
Blackdot config source command.

SUMMARY: Get a value with its source layer (JSON)

Always prints JSON: {"key", "value", "layer", "origin"}.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, build_store
from blackdot.core.exceptions import BlackdotError

SUMMARY = "Get a value with its source layer (JSON)"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("key", help="Dotted config key (e.g., 'vault.backend')")
    parser.add_argument("default", nargs="?", help="Value to report when nothing resolves")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=True)

    try:
        store = build_store()
        result = store.get_layered(args.key)
        value = result.value
        if not result.found and args.default is not None:
            value = args.default
        formatter.json_output(
            {
                "key": args.key,
                "value": value,
                "layer": result.source.value,
                "origin": result.origin,
            }
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_source_error")
        return 1
