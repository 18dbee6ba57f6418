"""
Blackdot CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (features/, config/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Store and resolver construction
"""
from ._output import OutputFormatter
from ._args import FEATURE_LAYERS, add_feature_name_arg, add_json_flag, add_persist_flags
from ._utils import build_resolver, build_store, warnings_payload

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "FEATURE_LAYERS",
    "add_json_flag",
    "add_feature_name_arg",
    "add_persist_flags",
    # Utilities
    "build_store",
    "build_resolver",
    "warnings_payload",
]
