"""
Blackdot config list command.

SUMMARY: List config layers and their files
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_store
from blackdot.core.config import LAYER_PRIORITY, ConfigLayer, env_key
from blackdot.core.exceptions import BlackdotError

SUMMARY = "List config layers and their files"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        store = build_store()
        layers = []
        for layer in LAYER_PRIORITY:
            if layer is ConfigLayer.ENV:
                location = env_key("<key>", store.env_prefix)
                exists = None
            elif layer is ConfigLayer.DEFAULT:
                location = "bundled defaults"
                exists = None
            else:
                path = store.layer_path(layer)
                location = str(path) if path is not None else None
                exists = path is not None and path.exists()
            layers.append(
                {
                    "layer": layer.value,
                    "location": location,
                    "exists": exists,
                    "writable": layer.writable,
                }
            )

        priority = " > ".join(layer.value for layer in LAYER_PRIORITY)
        if args.json:
            formatter.json_output({"layers": layers, "priority": priority})
            return 0

        formatter.text("Configuration Layers")
        formatter.text("=" * 60)
        for row in layers:
            if row["exists"] is None:
                status = ""
            else:
                status = " ✓" if row["exists"] else " (not found)"
            location = row["location"] or "(no project file found)"
            formatter.text(f"  {row['layer']:<8} {location}{status}")
        formatter.text("")
        formatter.text(f"Priority: {priority}")
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="config_list_error")
        return 1
