import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'blackdot'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from blackdot.core.log import reset_logging_for_tests
from blackdot.data import clear_caches

# Legacy inverted feature variables that do not carry the BLACKDOT_ prefix.
_LEGACY_ENV_KEYS = ("SKIP_WORKSPACE_SYMLINK", "SKIP_CLAUDE_SETUP")


@pytest.fixture(autouse=True)
def _clean_blackdot_env(monkeypatch):
    """Tests must be deterministic regardless of the developer's shell.

    Every BLACKDOT_* variable (config keys, feature flags, config dir, log
    level) and the legacy SKIP_* variables are removed for each test.
    """
    for key in list(os.environ):
        if key.startswith("BLACKDOT_"):
            monkeypatch.delenv(key, raising=False)
    for key in _LEGACY_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    clear_caches()
    yield
    reset_logging_for_tests()


@pytest.fixture
def isolated_config_env(tmp_path, monkeypatch):
    """
    Isolated config environment for tests.

    Points BLACKDOT_CONFIG_DIR at a temporary directory and makes a separate
    temporary project directory the working directory, so no test ever reads
    or writes real user files.

    Returns:
        Tuple of (config_dir, project_dir)
    """
    config_dir = tmp_path / "config"
    project_dir = tmp_path / "project"
    config_dir.mkdir()
    project_dir.mkdir()
    monkeypatch.setenv("BLACKDOT_CONFIG_DIR", str(config_dir))
    monkeypatch.chdir(project_dir)
    return config_dir, project_dir
