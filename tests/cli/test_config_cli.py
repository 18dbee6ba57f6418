from __future__ import annotations

import json

import yaml

from blackdot.cli._dispatcher import main


def _run(capsys, *argv: str):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_set_then_get(isolated_config_env, capsys) -> None:
    config_dir, _ = isolated_config_env

    code, out, _ = _run(capsys, "config", "set", "user", "vault.backend", "pass")
    assert code == 0
    assert "vault.backend = pass" in out

    code, out, _ = _run(capsys, "config", "get", "vault.backend")
    assert code == 0
    assert out.strip() == "pass"
    assert json.loads((config_dir / "config.json").read_text()) == {"vault": {"backend": "pass"}}


def test_set_parses_json_values(isolated_config_env, capsys) -> None:
    config_dir, _ = isolated_config_env
    _run(capsys, "config", "set", "machine", "backup.retention", "5")
    _run(capsys, "config", "set", "machine", "vault.auto_sync", "true")

    data = json.loads((config_dir / "machine.json").read_text())
    assert data == {"backup": {"retention": 5}, "vault": {"auto_sync": True}}

    code, out, _ = _run(capsys, "config", "get", "vault.auto_sync")
    assert out.strip() == "true"


def test_set_read_only_layer_fails(isolated_config_env, capsys) -> None:
    code, _, err = _run(capsys, "config", "set", "env", "vault.backend", "x")
    assert code == 1
    assert "read-only" in err


def test_set_unknown_layer_fails(isolated_config_env, capsys) -> None:
    code, _, err = _run(capsys, "config", "set", "global", "vault.backend", "x")
    assert code == 1
    assert "Unknown layer" in err


def test_get_falls_back_to_argument_default(isolated_config_env, capsys) -> None:
    code, out, _ = _run(capsys, "config", "get", "shell.theme", "dark")
    assert code == 0
    assert out.strip() == "dark"


def test_get_json_reports_source(isolated_config_env, capsys, monkeypatch) -> None:
    monkeypatch.setenv("BLACKDOT_VAULT_BACKEND", "1password")
    _run(capsys, "config", "set", "user", "vault.backend", "pass")

    code, out, _ = _run(capsys, "config", "get", "vault.backend", "--json")
    assert code == 0
    payload = json.loads(out)
    assert payload["value"] == "1password"
    assert payload["source"] == "env"
    assert payload["origin"] == "BLACKDOT_VAULT_BACKEND"


def test_get_direct_ignores_other_layers(isolated_config_env, capsys) -> None:
    _, project_dir = isolated_config_env
    (project_dir / ".blackdot.json").write_text(json.dumps({"vault": {"backend": "project"}}))

    code, _, err = _run(capsys, "config", "get", "vault.backend", "--direct")
    assert code == 1
    assert "key not found: vault.backend" in err

    code, out, _ = _run(capsys, "config", "get", "vault.backend", "fallback", "--direct")
    assert code == 0
    assert out.strip() == "fallback"


def test_get_with_malformed_layer_reports_warning(isolated_config_env, capsys) -> None:
    config_dir, _ = isolated_config_env
    (config_dir / "config.json").write_text("{oops")

    code, out, _ = _run(capsys, "config", "get", "vault.backend", "--json")
    assert code == 0
    payload = json.loads(out)
    assert payload["value"] == "bitwarden"
    assert payload["source"] == "default"
    assert payload["warnings"][0]["layer"] == "user"


def test_source_command(isolated_config_env, capsys) -> None:
    _, project_dir = isolated_config_env
    project_file = project_dir / ".blackdot.json"
    project_file.write_text(json.dumps({"vault": {"namespace": "work"}}))

    code, out, _ = _run(capsys, "config", "source", "vault.namespace")
    assert code == 0
    assert json.loads(out) == {
        "key": "vault.namespace",
        "value": "work",
        "layer": "project",
        "origin": str(project_file),
    }

    code, out, _ = _run(capsys, "config", "source", "missing.key", "fallback")
    assert json.loads(out) == {"key": "missing.key", "value": "fallback", "layer": "default", "origin": None}


def test_show_marks_active_layer(isolated_config_env, capsys) -> None:
    _run(capsys, "config", "set", "user", "vault.backend", "pass")
    _run(capsys, "config", "set", "machine", "vault.backend", "age")

    code, out, _ = _run(capsys, "config", "show", "vault.backend", "--json")
    assert code == 0
    payload = json.loads(out)
    active = [row["layer"] for row in payload["layers"] if row["active"]]
    assert active == ["machine"]
    assert payload["value"] == "age"

    code, out, _ = _run(capsys, "config", "show", "vault.backend")
    assert "→ machine" in out
    assert "Effective: age (from machine)" in out


def test_list_layers(isolated_config_env, capsys) -> None:
    config_dir, _ = isolated_config_env
    _run(capsys, "config", "set", "user", "a.b", "c")

    code, out, _ = _run(capsys, "config", "list", "--json")
    assert code == 0
    payload = json.loads(out)
    rows = {row["layer"]: row for row in payload["layers"]}
    assert payload["priority"] == "env > project > machine > user > default"
    assert rows["user"]["exists"] is True
    assert rows["user"]["location"] == str(config_dir / "config.json")
    assert rows["machine"]["exists"] is False
    assert rows["env"]["writable"] is False


def test_merged_yaml(isolated_config_env, capsys) -> None:
    _run(capsys, "config", "set", "user", "vault.backend", "pass")
    _run(capsys, "config", "set", "project", "vault.backend", "age")

    code, out, _ = _run(capsys, "config", "merged", "--format", "yaml")
    assert code == 0
    assert yaml.safe_load(out) == {"vault": {"backend": "age"}}

    code, out, _ = _run(capsys, "config", "merged")
    assert json.loads(out) == {"vault": {"backend": "age"}}


def test_init_machine_and_project(isolated_config_env, capsys) -> None:
    config_dir, project_dir = isolated_config_env

    code, out, _ = _run(capsys, "config", "init", "machine", "work-laptop")
    assert code == 0
    assert "Created machine config" in out
    data = json.loads((config_dir / "machine.json").read_text())
    assert data["machine"]["identifier"] == "work-laptop"

    code, out, _ = _run(capsys, "config", "init", "machine", "--json")
    assert json.loads(out)["status"] == "exists"

    code, _, _ = _run(capsys, "config", "init", "project")
    assert code == 0
    assert (project_dir / ".blackdot.json").exists()
