"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse

from blackdot.core.config import ConfigLayer

# Layers that hold persisted feature state.
FEATURE_LAYERS = (ConfigLayer.USER.value, ConfigLayer.MACHINE.value)


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_feature_name_arg(parser: argparse.ArgumentParser, help_text: str = "Feature name") -> None:
    parser.add_argument("name", help=help_text)


def add_persist_flags(parser: argparse.ArgumentParser) -> None:
    """Add --persist and --layer for commands that change feature state.

    Args:
        parser: ArgumentParser to add the flags to
    """
    parser.add_argument(
        "--persist",
        "-p",
        action="store_true",
        help="Save the resulting feature state to a config file",
    )
    parser.add_argument(
        "--layer",
        choices=FEATURE_LAYERS,
        default=ConfigLayer.USER.value,
        help="Config layer to persist into (default: user)",
    )


__all__ = [
    "FEATURE_LAYERS",
    "add_json_flag",
    "add_feature_name_arg",
    "add_persist_flags",
]
