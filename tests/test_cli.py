from __future__ import annotations

import json
from pathlib import Path

import pytest

from funcbridge import cli
from funcbridge.config.config import DATABASE_URL_ENV

TOOLS_ROOT = Path(__file__).resolve().parents[1] / "tools"


@pytest.fixture(autouse=True)
def no_database(monkeypatch):
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)


def run(capsys, *argv):
    code = cli.main(list(argv))
    out = capsys.readouterr()
    return code, out.out, out.err


def test_call_prints_envelope(capsys, sandbox):
    code, out, _ = run(
        capsys,
        "--tools-root", str(TOOLS_ROOT),
        "--mount", f"{sandbox}:/",
        "call", "calculator.add", '{"x": "10", "y": "20"}',
    )
    assert code == 0
    assert json.loads(out) == {"result": 30}


def test_call_failure_exit_code(capsys):
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "call", "calculator.add", '{"x": "abc"}')
    assert code == 1
    assert "error" in json.loads(out)


def test_call_with_debug_env_writes_into_mount(capsys, sandbox):
    code, _, _ = run(
        capsys,
        "--tools-root", str(TOOLS_ROOT),
        "--env", "DEBUG=true",
        "--mount", f"{sandbox}:/",
        "call", "calculator.add", '{"x": 1, "y": 2}',
    )
    assert code == 0
    assert (sandbox / "debug.log").read_text() == "Adding 1 + 2"


def test_file_functions_through_cli(capsys, sandbox):
    base = ["--tools-root", str(TOOLS_ROOT), "--mount", f"{sandbox}:/"]
    assert run(capsys, *base, "call", "files.write_text", '{"path": "/a.txt", "text": "hi"}')[0] == 0
    code, out, _ = run(capsys, *base, "call", "files.list_dir", '{"path": "/"}')
    assert code == 0
    assert json.loads(out) == {"result": [{"name": "a.txt", "size": 2, "is_dir": False}]}


def test_unmounted_path_fails(capsys):
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "call", "files.read_text", '{"path": "/a.txt"}')
    assert code == 1
    assert json.loads(out) == {"error": "path not mounted: /a.txt"}


def test_invalid_json(capsys):
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "call", "calculator.add", "{nope")
    assert code == 2
    assert json.loads(out)["error"].startswith("invalid JSON arguments")


def test_list_and_schema(capsys):
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "list")
    assert code == 0
    assert "calculator.add(x: int, y: int) -> (int)" in out

    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "schema", "calculator.divide")
    doc = json.loads(out)
    assert doc["request"]["required"] == ["x", "y"]
    assert list(doc["response"]["properties"]) == ["result0", "result1"]


def test_schema_for_unknown_function(capsys):
    code, _, err = run(capsys, "--tools-root", str(TOOLS_ROOT), "schema", "nope")
    assert code == 2
    assert "function not found: nope" in err


def test_runs_without_database(capsys):
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "runs")
    assert code == 1
    assert "No audit database configured" in out


def test_init_db_and_runs(capsys, tmp_path, monkeypatch):
    db_path = tmp_path / "audit.db"
    monkeypatch.setenv(DATABASE_URL_ENV, f"sqlite:///{db_path}")
    assert run(capsys, "--tools-root", str(TOOLS_ROOT), "init-db")[0] == 0
    assert db_path.exists()

    run(capsys, "--tools-root", str(TOOLS_ROOT), "call", "calculator.add", '{"x": 2, "y": 3}')
    code, out, _ = run(capsys, "--tools-root", str(TOOLS_ROOT), "runs", "--function", "calculator.add")
    assert code == 0
    assert "function=calculator.add status=ok channel=cli" in out


def test_config_file(capsys, tmp_path, sandbox):
    cfg = tmp_path / "funcbridge.yaml"
    cfg.write_text(
        f"mounts:\n  - {sandbox}:/\ntools_root: {TOOLS_ROOT}\nenv:\n  DEBUG: 'true'\n",
        encoding="utf-8",
    )
    code, out, _ = run(capsys, "--config", str(cfg), "call", "calculator.add", '{"x": 4, "y": 5}')
    assert code == 0
    assert json.loads(out) == {"result": 9}
    assert (sandbox / "debug.log").exists()


def test_app_run_uses_existing_app(capsys, app):
    code = app.run(["call", "Add", '{"x": 1, "y": 1}'])
    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"result": 2}
