from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from blackdot.core.config import ConfigLayer, ConfigStore
from blackdot.core.exceptions import (
    ConfigKeyNotFoundError,
    ConfigValueError,
    MalformedLayerError,
    ReadOnlyLayerError,
)


@pytest.fixture
def dirs(tmp_path: Path):
    config_dir = tmp_path / "cfg"
    project_dir = tmp_path / "work"
    project_dir.mkdir()
    return config_dir, project_dir


def _store(dirs, environ=None, **kwargs) -> ConfigStore:
    config_dir, project_dir = dirs
    return ConfigStore(config_dir, cwd=project_dir, environ={} if environ is None else environ, **kwargs)


def _write(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


# ---------------------------------------------------------------------------
# Layered reads
# ---------------------------------------------------------------------------


def test_missing_key_falls_through_to_default(dirs) -> None:
    result = _store(dirs).get_layered("does.not.exist")

    assert result.source is ConfigLayer.DEFAULT
    assert result.value == ""
    assert result.origin is None
    assert result.found is False


def test_bundled_defaults_are_the_last_layer(dirs) -> None:
    store = _store(dirs)
    result = store.get_layered("vault.backend")
    assert result.value == "bitwarden"
    assert result.source is ConfigLayer.DEFAULT

    assert store.get_layered("backup.retention").value == 10


def test_set_user_then_get_layered(dirs) -> None:
    store = _store(dirs, defaults={})
    path = store.set(ConfigLayer.USER, "vault.backend", "pass")

    result = store.get_layered("vault.backend")
    assert result.value == "pass"
    assert result.source is ConfigLayer.USER
    assert result.origin == str(path)
    assert json.loads(path.read_text()) == {"vault": {"backend": "pass"}}


def test_env_outranks_user(dirs) -> None:
    env = {"BLACKDOT_VAULT_BACKEND": "1password"}
    store = _store(dirs, environ=env)
    store.set("user", "vault.backend", "pass")

    result = store.get_layered("vault.backend")
    assert result.value == "1password"
    assert result.source is ConfigLayer.ENV
    assert result.origin == "BLACKDOT_VAULT_BACKEND"


def test_project_beats_machine_beats_user(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs)
    store.set("user", "editor", "nano")
    store.set("machine", "editor", "vim")
    assert store.get_layered("editor").source is ConfigLayer.MACHINE

    _write(project_dir / ".blackdot.json", {"editor": "code"})
    result = store.get_layered("editor")
    assert result.value == "code"
    assert result.source is ConfigLayer.PROJECT


def test_empty_string_does_not_win(dirs) -> None:
    store = _store(dirs, environ={"BLACKDOT_SHELL_THEME": ""})
    store.set("user", "shell.theme", "dark")
    store.set("machine", "shell.theme", "")

    result = store.get_layered("shell.theme")
    assert result.value == "dark"
    assert result.source is ConfigLayer.USER


def test_typed_values_are_preserved(dirs) -> None:
    store = _store(dirs)
    store.set("user", "vault.auto_sync", True)
    store.set("user", "backup.paths", ["~/.ssh", "~/.gnupg"])

    sync = store.get_layered("vault.auto_sync")
    assert sync.value is True
    assert sync.as_str() == "true"
    assert store.get_layered("backup.paths").value == ["~/.ssh", "~/.gnupg"]


def test_project_file_discovered_from_nested_directory(tmp_path: Path) -> None:
    _write(tmp_path / "repo" / ".blackdot.json", {"vault": {"namespace": "repo"}})
    nested = tmp_path / "repo" / "src" / "pkg"
    nested.mkdir(parents=True)

    store = ConfigStore(tmp_path / "cfg", cwd=nested, environ={})
    result = store.get_layered("vault.namespace")
    assert result.value == "repo"
    assert result.origin == str(tmp_path / "repo" / ".blackdot.json")


def test_env_layer_is_read_live(dirs) -> None:
    env: dict = {}
    store = _store(dirs, environ=env)
    store.set("user", "vault.backend", "pass")
    assert store.get_layered("vault.backend").value == "pass"

    env["BLACKDOT_VAULT_BACKEND"] = "bitwarden"
    assert store.get_layered("vault.backend").source is ConfigLayer.ENV


# ---------------------------------------------------------------------------
# Direct reads
# ---------------------------------------------------------------------------


def test_get_reads_user_layer_only(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs, environ={"BLACKDOT_VAULT_BACKEND": "env"})
    _write(project_dir / ".blackdot.json", {"vault": {"backend": "project"}})

    with pytest.raises(ConfigKeyNotFoundError) as exc:
        store.get("vault.backend")
    assert exc.value.key == "vault.backend"

    store.set("user", "vault.backend", "user")
    assert store.get("vault.backend") == "user"


def test_get_returns_present_empty_string(dirs) -> None:
    store = _store(dirs)
    store.set("user", "shell.prompt", "")
    assert store.get("shell.prompt") == ""


def test_get_from_single_layer(dirs) -> None:
    store = _store(dirs)
    store.set("machine", "features.vault", False)

    found = store.get_from("machine", "features.vault")
    assert found is not None and found.value is False
    assert store.get_from("user", "features.vault") is None
    with pytest.raises(ConfigValueError):
        store.get_from("env", "features.vault")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("layer", ["env", "default"])
def test_read_only_layers(dirs, layer: str) -> None:
    with pytest.raises(ReadOnlyLayerError) as exc:
        _store(dirs).set(layer, "vault.backend", "x")
    assert exc.value.layer == layer


@pytest.mark.parametrize("layer", [ConfigLayer.ENV, ConfigLayer.DEFAULT])
def test_write_target_refuses_layers_without_a_file(dirs, layer: ConfigLayer) -> None:
    with pytest.raises(ConfigValueError) as exc:
        _store(dirs)._write_target(layer)
    assert exc.value.context["layer"] == layer.value


def test_write_target_for_file_layers(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs)
    assert store._write_target(ConfigLayer.USER) == config_dir / "config.json"
    assert store._write_target(ConfigLayer.MACHINE) == config_dir / "machine.json"
    assert store._write_target(ConfigLayer.PROJECT) == project_dir / ".blackdot.json"


def test_set_project_without_file_creates_one_in_cwd(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs)

    path = store.set("project", "vault.namespace", "work")

    assert path == project_dir / ".blackdot.json"
    assert store.get_layered("vault.namespace").source is ConfigLayer.PROJECT


def test_set_rejects_non_object_intermediate(dirs) -> None:
    store = _store(dirs)
    store.set("user", "vault", "flat")

    with pytest.raises(ConfigValueError) as exc:
        store.set("user", "vault.backend", "pass")
    assert "vault" in str(exc.value)
    assert store.get("vault") == "flat"


def test_set_rejects_empty_key(dirs) -> None:
    with pytest.raises(ConfigValueError):
        _store(dirs).set("user", " . ", "x")


def test_set_merges_into_existing_document(dirs) -> None:
    store = _store(dirs)
    store.set("user", "vault.backend", "pass")
    path = store.set("user", "vault.namespace", "home")

    assert json.loads(path.read_text()) == {"vault": {"backend": "pass", "namespace": "home"}}


# ---------------------------------------------------------------------------
# Malformed files
# ---------------------------------------------------------------------------


def test_malformed_layer_is_skipped_with_warning(dirs, caplog) -> None:
    config_dir, _ = dirs
    store = _store(dirs)
    store.set("machine", "vault.backend", "pass")
    config_dir.joinpath("config.json").write_text("{not json")

    with caplog.at_level(logging.WARNING, logger="blackdot.core.config.store"):
        result = store.get_layered("vault.namespace")

    assert result.source is ConfigLayer.DEFAULT
    assert store.get_layered("vault.backend").source is ConfigLayer.MACHINE
    assert any("malformed" in r.getMessage() for r in caplog.records)

    warnings = store.drain_warnings()
    assert len(warnings) == 1
    assert warnings[0].layer is ConfigLayer.USER
    assert store.warnings == []


def test_non_object_document_is_malformed(dirs) -> None:
    config_dir, _ = dirs
    _write(config_dir / "machine.json", ["not", "an", "object"])
    store = _store(dirs)

    assert store.get_layered("vault.backend").source is ConfigLayer.DEFAULT
    assert store.warnings[0].layer is ConfigLayer.MACHINE


def test_write_to_malformed_file_raises_and_preserves_it(dirs) -> None:
    config_dir, _ = dirs
    user_file = config_dir / "config.json"
    user_file.parent.mkdir(parents=True)
    user_file.write_text("{broken")

    with pytest.raises(MalformedLayerError):
        _store(dirs).set("user", "vault.backend", "pass")
    assert user_file.read_text() == "{broken"


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


def test_set_invalidates_cached_resolution(dirs) -> None:
    store = _store(dirs)
    store.set("user", "vault.backend", "pass")
    assert store.get_layered("vault.backend").value == "pass"

    store.set("user", "vault", {"backend": "age"})
    assert store.get_layered("vault.backend").value == "age"


def test_external_edit_is_picked_up(dirs) -> None:
    config_dir, _ = dirs
    store = _store(dirs, cache_ttl=3600)
    store.set("user", "vault.backend", "pass")
    assert store.get_layered("vault.backend").value == "pass"

    _write(config_dir / "config.json", {"vault": {"backend": "bitwarden-cli"}})
    assert store.get_layered("vault.backend").value == "bitwarden-cli"


def test_concurrent_layered_reads(dirs) -> None:
    store = _store(dirs)
    for i in range(10):
        store.set("user", f"section.key{i}", i)

    results: list = []
    errors: list = []

    def reader() -> None:
        try:
            for _ in range(50):
                results.append([store.get_layered(f"section.key{i}").value for i in range(10)])
        except Exception as e:  # pragma: no cover - surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert all(r == list(range(10)) for r in results)


# ---------------------------------------------------------------------------
# Provenance and helpers
# ---------------------------------------------------------------------------


def test_layer_values_marks_single_active_layer(dirs) -> None:
    store = _store(dirs)
    store.set("user", "vault.backend", "pass")
    store.set("machine", "vault.backend", "age")

    rows = {row.layer: row for row in store.layer_values("vault.backend")}

    assert [layer.value for layer in rows] == ["env", "project", "machine", "user", "default"]
    assert rows[ConfigLayer.MACHINE].active
    assert rows[ConfigLayer.USER].present and not rows[ConfigLayer.USER].active
    assert rows[ConfigLayer.DEFAULT].value == "bitwarden"
    assert rows[ConfigLayer.PROJECT].note == "no project file found"
    assert sum(1 for row in rows.values() if row.active) == 1


def test_merged_view(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs)
    store.set("user", "vault.backend", "pass")
    store.set("user", "vault.namespace", "home")
    store.set("machine", "vault.namespace", "laptop")
    _write(project_dir / ".blackdot.json", {"backup": {"retention": 3}})

    assert store.merged() == {
        "vault": {"backend": "pass", "namespace": "laptop"},
        "backup": {"retention": 3},
    }


def test_init_layer_machine_and_project(dirs) -> None:
    config_dir, project_dir = dirs
    store = _store(dirs)

    path, created = store.init_layer("machine", "work-laptop")
    assert created and path == config_dir / "machine.json"
    assert store.get_layered("machine.identifier").value == "work-laptop"

    again, created_again = store.init_layer("machine", "other")
    assert again == path and not created_again
    assert json.loads(path.read_text())["machine"]["identifier"] == "work-laptop"

    project_path, created = store.init_layer("project")
    assert created and project_path == project_dir / ".blackdot.json"

    with pytest.raises(ConfigValueError):
        store.init_layer("user")
