from __future__ import annotations

import sys
from pathlib import Path

import pytest

from glextract.cli import run
from glextract.utils.logging import reset_logging

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def _argv(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["glextract", *args])


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    reset_logging()


def test_no_arguments_prints_usage_and_succeeds(monkeypatch, capsys):
    _argv(monkeypatch)
    rc = run()
    out = capsys.readouterr().out
    assert rc == 0
    assert "usage: glextract" in out
    assert "#define GLDEFINE(name,type)" in out


def test_run_writes_output_and_status_line(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "glfunc.inc"
    _argv(monkeypatch, str(FIXTURES / "glext.rules"), str(FIXTURES / "glext_min.h"), str(out), "--progress")

    rc = run()
    stdout = capsys.readouterr().out

    assert rc == 0
    assert "GLDEFINE(glDrawRangeElements,PFNGLDRAWRANGEELEMENTSPROC)" in out.read_text(encoding="latin-1")
    assert "[1/2] GL_VERSION_1_2: 2 accepted, 0 skipped" in stdout
    assert "[2/2] GL_VERSION_2_0: 3 accepted, 1 skipped" in stdout
    assert "functions: 5 accepted, 1 skipped; constants: 3 accepted, 1 skipped" in stdout


def test_append_rerun_reports_everything_skipped(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "glfunc.inc"
    args = [str(FIXTURES / "glext.rules"), str(FIXTURES / "glext_min.h"), str(out), "--append"]
    _argv(monkeypatch, *args)
    assert run() == 0
    capsys.readouterr()

    _argv(monkeypatch, *args)
    assert run() == 0
    assert "functions: 0 accepted, 6 skipped; constants: 0 accepted, 4 skipped" in capsys.readouterr().out


def test_unknown_option_exits_1(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    _argv(monkeypatch, "a", "b", "c", "--frobnicate")
    rc = run()
    err = capsys.readouterr().err
    assert rc == 1
    assert "usage:" in err
    assert "--frobnicate" in err


def test_missing_rule_file_exits_1(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    _argv(monkeypatch, str(tmp_path / "none.rules"), str(FIXTURES / "glext_min.h"), str(tmp_path / "o.inc"))
    rc = run()
    assert rc == 1
    assert "cannot open rule definition file" in capsys.readouterr().err


def test_oversized_input_exits_1(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    _argv(
        monkeypatch,
        str(FIXTURES / "glext.rules"),
        str(FIXTURES / "glext_min.h"),
        str(tmp_path / "o.inc"),
        "--max-input-bytes",
        "10",
    )
    rc = run()
    assert rc == 1
    assert "limit is 10" in capsys.readouterr().err


def test_bad_config_exits_1(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    _argv(monkeypatch, "a", "b", "c", "--kinds", "nope")
    assert run() == 1
    assert "Config error" in capsys.readouterr().err


def test_append_to_undecodable_artifact_exits_1(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "glfunc.inc"
    out.write_bytes(b"GLDEFINE(glFoo,PFNGLFOOPROC)\n\xff\n")
    _argv(
        monkeypatch,
        str(FIXTURES / "glext.rules"),
        str(FIXTURES / "glext_min.h"),
        str(out),
        "-a",
        "--encoding",
        "ascii",
    )
    rc = run()
    err = capsys.readouterr().err
    assert rc == 1
    assert "not valid ascii text" in err
    assert out.read_bytes() == b"GLDEFINE(glFoo,PFNGLFOOPROC)\n\xff\n"


def test_quiet_run_prints_only_status_line(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(tmp_path)
    _argv(
        monkeypatch,
        str(FIXTURES / "glext.rules"),
        str(FIXTURES / "glext_min.h"),
        str(tmp_path / "o.inc"),
        "--progress",
        "--quiet",
    )
    assert run() == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["functions: 5 accepted, 1 skipped; constants: 3 accepted, 1 skipped"]
    assert captured.err == ""
