from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from glextract.config import build_parser, resolve_config
from glextract.errors import ConfigError, UsageError

PATHS = ["defs.rules", "glext.h", "glfunc.inc"]


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_config_defaults():
    cfg = resolve_config(build_parser().parse_args(PATHS))
    assert cfg.rules_path == "defs.rules"
    assert cfg.input_path == "glext.h"
    assert cfg.output_path == "glfunc.inc"
    assert cfg.extract.append is False
    assert cfg.extract.kinds == ("define", "method", "const")
    assert cfg.extract.constants == "first"
    assert cfg.files.encoding == "latin-1"
    assert "GLAPI" in cfg.patterns.linkage


def test_config_is_immutable():
    cfg = resolve_config(build_parser().parse_args(PATHS))
    with pytest.raises(FrozenInstanceError):
        cfg.extract.append = True  # type: ignore[misc]


def test_config_cli_overrides_toml(tmp_path: Path):
    cfg_file = tmp_path / "custom.toml"
    cfg_file.write_text(
        """
[extract]
kinds = ["const"]
constants = "last"

[files]
max_input_bytes = 1000
""".strip()
    )
    args = build_parser().parse_args([*PATHS, "--config", str(cfg_file), "--kinds", "define,method", "-a"])
    cfg = resolve_config(args)

    assert cfg.extract.kinds == ("define", "method")
    assert cfg.extract.constants == "last"
    assert cfg.extract.append is True
    assert cfg.files.max_input_bytes == 1000
    assert cfg.config_path == str(cfg_file)


def test_config_discovers_local_toml(tmp_path: Path):
    (tmp_path / "glextract.toml").write_text('[patterns]\nlinkage = ["EGLAPI"]\n')
    cfg = resolve_config(build_parser().parse_args(PATHS))
    assert cfg.patterns.linkage == ("EGLAPI",)
    assert cfg.config_path == "glextract.toml"


def test_config_env_overrides_toml(tmp_path: Path, monkeypatch):
    cfg_file = tmp_path / "custom.toml"
    cfg_file.write_text('[files]\nmax_input_bytes = 1000\n')
    monkeypatch.setenv("GLEXTRACT_FILES__MAX_INPUT_BYTES", "2000")
    monkeypatch.setenv("GLEXTRACT_EXTRACT__KINDS", "define,const")
    cfg = resolve_config(build_parser().parse_args([*PATHS, "--config", str(cfg_file)]))

    assert cfg.files.max_input_bytes == 2000
    assert cfg.extract.kinds == ("define", "const")


def test_kind_toggles_select_exactly_the_toggled_kinds():
    cfg = resolve_config(build_parser().parse_args([*PATHS, "-d", "-c", "--kinds", "method"]))
    assert cfg.extract.kinds == ("define", "const")


def test_config_rejects_unknown_kind():
    with pytest.raises(ConfigError, match="Unsupported emission kind: bogus"):
        resolve_config(build_parser().parse_args([*PATHS, "--kinds", "define,bogus"]))


def test_config_rejects_unknown_key(tmp_path: Path):
    cfg_file = tmp_path / "custom.toml"
    cfg_file.write_text("[extract]\nfrobnicate = true\n")
    with pytest.raises(ConfigError, match="Unknown configuration key"):
        resolve_config(build_parser().parse_args([*PATHS, "--config", str(cfg_file)]))


def test_config_rejects_non_positive_size_limit():
    with pytest.raises(ConfigError, match="max_input_bytes"):
        resolve_config(build_parser().parse_args([*PATHS, "--max-input-bytes", "0"]))


def test_parser_raises_usage_error_for_unknown_option():
    with pytest.raises(UsageError):
        build_parser().parse_args([*PATHS, "--bogus"])


def test_parser_raises_usage_error_for_missing_path():
    with pytest.raises(UsageError):
        build_parser().parse_args(PATHS[:2])


def test_config_discovers_toml_beside_rule_file(tmp_path: Path):
    rules_dir = tmp_path / "defs"
    rules_dir.mkdir()
    (rules_dir / "glextract.toml").write_text('[extract]\nconstants = "last"\n')
    (tmp_path / "glextract.toml").write_text('[extract]\nconstants = "first"\n')
    cfg = resolve_config(build_parser().parse_args([str(rules_dir / "defs.rules"), "glext.h", "glfunc.inc"]))
    assert cfg.extract.constants == "last"
    assert cfg.config_path == str(rules_dir / "glextract.toml")


def test_unset_cli_options_keep_toml_values(tmp_path: Path):
    cfg_file = tmp_path / "custom.toml"
    cfg_file.write_text('[files]\nencoding = "cp1252"\n\n[logging]\nlog_file = "run.log"\n')
    cfg = resolve_config(build_parser().parse_args([*PATHS, "--config", str(cfg_file)]))
    assert cfg.files.encoding == "cp1252"
    assert cfg.logging.log_file == "run.log"


@pytest.mark.parametrize("encoding", ["utf-8", "utf-16", "shift_jis", "gbk"])
def test_config_rejects_multibyte_encoding(encoding: str):
    with pytest.raises(ConfigError, match="single-byte"):
        resolve_config(build_parser().parse_args([*PATHS, "--encoding", encoding]))


@pytest.mark.parametrize("encoding", ["latin-1", "ascii", "cp1252"])
def test_config_accepts_single_byte_encoding(encoding: str):
    assert resolve_config(build_parser().parse_args([*PATHS, "--encoding", encoding])).files.encoding == encoding


def test_config_rejects_unknown_encoding():
    with pytest.raises(ConfigError, match="Unknown encoding"):
        resolve_config(build_parser().parse_args([*PATHS, "--encoding", "no-such-codec"]))
