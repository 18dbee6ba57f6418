from __future__ import annotations

import logging

from blackdot.core.log import LOG_LEVEL_ENV, configure_logging, resolve_level


def test_resolve_level_precedence() -> None:
    assert resolve_level("debug", {LOG_LEVEL_ENV: "error"}) == "DEBUG"
    assert resolve_level(None, {LOG_LEVEL_ENV: " info "}) == "INFO"
    assert resolve_level(None, {}) == "WARNING"


def test_configure_logging_is_idempotent_per_target() -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    configure_logging("INFO")
    configure_logging("DEBUG")

    assert len(root.handlers) == before + 1
    assert root.level == logging.DEBUG


def test_configure_logging_to_file(tmp_path) -> None:
    log_path = tmp_path / "logs" / "blackdot.log"

    configure_logging("INFO", log_path=log_path)
    logging.getLogger("blackdot.test").info("hello from the store")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "INFO blackdot.test: hello from the store" in log_path.read_text()


def test_unknown_level_name_falls_back_to_warning() -> None:
    configure_logging("LOUD")
    assert logging.getLogger().level == logging.WARNING
