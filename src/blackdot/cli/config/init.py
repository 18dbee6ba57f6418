"""
Blackdot config init command.

SUMMARY: Create a starter machine or project config file

An existing file is never overwritten.
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_store
from blackdot.core.exceptions import BlackdotError

SUMMARY = "Create a starter machine or project config file"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("layer", choices=["machine", "project"], help="Layer to initialize")
    parser.add_argument(
        "identifier",
        nargs="?",
        help="Machine identifier (default: hostname); ignored for project",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        store = build_store()
        path, created = store.init_layer(args.layer, args.identifier)
        if created:
            message = f"✓ Created {args.layer} config: {path}"
        else:
            message = f"{args.layer.title()} config already exists: {path}"
        formatter.success(
            {"layer": args.layer, "path": str(path), "created": created},
            message,
            status="created" if created else "exists",
        )
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_init_error")
        return 1
