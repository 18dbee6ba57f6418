from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from blackdot.core.utils.io import ensure_directory

LOG_LEVEL_ENV = "BLACKDOT_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_BLACKDOT_HANDLER: logging.Handler | None = None
_CONFIGURED_TARGET: str | None = None
_JSON_MODE_NULL_HANDLER_INSTALLED: bool = False


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def resolve_level(cli_level: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
    """``--log-level`` beats ``BLACKDOT_LOG_LEVEL``, which beats WARNING."""
    if cli_level:
        return cli_level.upper()
    env = os.environ if environ is None else environ
    raw = env.get(LOG_LEVEL_ENV, "").strip()
    return raw.upper() if raw else DEFAULT_LEVEL


def configure_logging(level: str = DEFAULT_LEVEL, log_path: Optional[Path] = None) -> None:
    """Install one blackdot handler on the root logger.

    Logs go to stderr, or to ``log_path`` when given. Idempotent per target:
    calling again with the same target only updates the level.
    """
    global _BLACKDOT_HANDLER, _CONFIGURED_TARGET

    lvl = _level_from_name(level)
    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger()
    root.setLevel(lvl)

    if _BLACKDOT_HANDLER is not None and _CONFIGURED_TARGET == target:
        _BLACKDOT_HANDLER.setLevel(lvl)
        return

    if _BLACKDOT_HANDLER is not None:
        root.removeHandler(_BLACKDOT_HANDLER)
        _BLACKDOT_HANDLER.close()
        _BLACKDOT_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        ensure_directory(Path(target).parent)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(lvl)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    _BLACKDOT_HANDLER = handler
    _CONFIGURED_TARGET = target


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by :func:`configure_logging`."""
    global _BLACKDOT_HANDLER, _CONFIGURED_TARGET
    if _BLACKDOT_HANDLER is not None:
        logging.getLogger().removeHandler(_BLACKDOT_HANDLER)
        _BLACKDOT_HANDLER.close()
    logging.getLogger().setLevel(logging.WARNING)
    _BLACKDOT_HANDLER = None
    _CONFIGURED_TARGET = None


def suppress_lastresort_in_json_mode() -> None:
    """Keep logging's implicit lastResort handler off stderr during ``--json`` output.

    With no handlers configured, WARNING records fall through to
    ``logging.lastResort``. A NullHandler on the root logger stops that
    without changing any logger levels.
    """
    global _JSON_MODE_NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _JSON_MODE_NULL_HANDLER_INSTALLED = True


__all__ = [
    "LOG_LEVEL_ENV",
    "configure_logging",
    "reset_logging_for_tests",
    "resolve_level",
    "suppress_lastresort_in_json_mode",
]
