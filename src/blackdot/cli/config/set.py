"""
Blackdot config set command.

SUMMARY: Set a config value in a specific layer

Values are parsed as JSON when possible (true, 10, ["a"]) and stored as
plain strings otherwise.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_store
from blackdot.core.config import parse_layer, parse_value, value_to_str
from blackdot.core.exceptions import BlackdotError, ConfigValueError

SUMMARY = "Set a config value in a specific layer"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("layer", help="Target layer: user, machine or project")
    parser.add_argument("key", help="Dotted config key (e.g., 'vault.backend')")
    parser.add_argument("value", help="Value (JSON literal or plain string)")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        try:
            layer = parse_layer(args.layer)
        except ValueError as exc:
            raise ConfigValueError(str(exc), context={"layer": args.layer}) from exc

        store = build_store()
        value = parse_value(args.value)
        path = store.set(layer, args.key, value)

        formatter.success(
            {"layer": layer.value, "key": args.key, "value": value, "path": str(path)},
            f"✓ Set {args.key} = {value_to_str(value)} in {layer.value} layer ({path})",
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_set_error")
        return 1
