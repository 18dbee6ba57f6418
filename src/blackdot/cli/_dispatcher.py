"""
Entry point for the ``blackdot`` command.

Commands are plain modules under ``blackdot/cli/<domain>/<command>.py``. Each
one exposes ``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``;
dropping a new module into a domain folder is all it takes to add a command.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, NamedTuple, Optional

from blackdot.core.log import configure_logging, resolve_level, suppress_lastresort_in_json_mode

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
CLI_DIR = Path(__file__).parent


class CommandSpec(NamedTuple):
    name: str
    summary: str
    register_args: Optional[Callable[[argparse.ArgumentParser], None]]
    main: Optional[Callable[[argparse.Namespace], int]]


def _is_command_file(path: Path) -> bool:
    return path.suffix == ".py" and not path.name.startswith("_")


@lru_cache(maxsize=1)
def discover_domains() -> Dict[str, Path]:
    """Domain folders under ``blackdot/cli`` holding at least one command module."""
    return {
        entry.name: entry
        for entry in sorted(CLI_DIR.iterdir())
        if entry.is_dir()
        and not entry.name.startswith("_")
        and any(_is_command_file(f) for f in entry.iterdir())
    }


@lru_cache(maxsize=None)
def discover_commands(domain: str) -> Dict[str, CommandSpec]:
    """Import every command module of ``domain``; broken modules are logged and left out."""
    commands: Dict[str, CommandSpec] = {}
    for path in sorted((CLI_DIR / domain).glob("*.py")):
        if not _is_command_file(path):
            continue
        try:
            module = importlib.import_module(f"blackdot.cli.{domain}.{path.stem}")
        except ImportError:
            logger.warning("Skipping command %s %s: import failed", domain, path.stem, exc_info=True)
            continue
        commands[path.stem] = CommandSpec(
            name=path.stem,
            summary=getattr(module, "SUMMARY", f"{domain} {path.stem}"),
            register_args=getattr(module, "register_args", None),
            main=getattr(module, "main", None),
        )
    return commands


def _get_version() -> str:
    from blackdot import __version__

    return __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blackdot",
        description="Blackdot - feature registry and layered configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: $BLACKDOT_LOG_LEVEL or WARNING)",
    )

    domains = parser.add_subparsers(
        dest="domain",
        title="domains",
        description="Available command domains",
        metavar="<domain>",
    )
    for domain in discover_domains():
        commands = discover_commands(domain)
        if not commands:
            continue
        domain_parser = domains.add_parser(domain, help=f"{domain.title()} management commands")
        domain_parser.set_defaults(_domain_parser=domain_parser)
        subcommands = domain_parser.add_subparsers(
            dest="command",
            title="commands",
            description=f"Available {domain} commands",
            metavar="<command>",
        )
        for spec in commands.values():
            command_parser = subcommands.add_parser(spec.name, help=spec.summary)
            if spec.register_args is not None:
                spec.register_args(command_parser)
            if spec.main is not None:
                command_parser.set_defaults(_func=spec.main)

    return parser


def _setup_logging(args: argparse.Namespace) -> None:
    # --json output must stay machine-readable unless a level was asked for.
    if getattr(args, "json", False) and args.log_level is None:
        suppress_lastresort_in_json_mode()
    else:
        configure_logging(resolve_level(args.log_level))


def main(argv: Optional[list] = None) -> int:
    """Run one ``blackdot`` invocation and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    _setup_logging(args)

    if not args.domain:
        parser.print_help()
        return 0

    func = getattr(args, "_func", None)
    if func is None:
        args._domain_parser.print_help()
        return 0

    logger.debug("Running %s %s", args.domain, args.command)
    try:
        return func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.debug("Unhandled error in %s %s", args.domain, args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
