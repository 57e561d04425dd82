from __future__ import annotations

import argparse
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from glextract.emit.formatter import ALL_KINDS, KIND_CONST, KIND_DEFINE, KIND_METHOD
from glextract.errors import ConfigError, UsageError
from glextract.patterns.library import DEFAULT_CONVENTIONS, DEFAULT_LINKAGE

USAGE_NOTES = """\
The output file holds one macro call per line:

  GLDEFINE(name,PFNNAMEPROC)
  DEF_GLMETHOD(ret, returns_value, name, (types...), (names...))
  DEF_GLCONST(name, 0xvalue)

Define the macros before including it, e.g. in a header

  #define GLDEFINE(name,type) extern type name;
  #include "glfunc.inc"
  #undef GLDEFINE

and in the loader

  #define GLDEFINE(name,type) name = (type)wglGetProcAddress(#name);
  void LoadGLFunc() {
  #include "glfunc.inc"
  }
  #undef GLDEFINE

The rule file lists guard/begin/end line triples, ended by a blank line.
Patterns may use ${ALNUM} ${RET} ${ARG} ${TO_RPAREN} ${TO_COMMA}.
"""


@dataclass(frozen=True)
class ExtractConfig:
    append: bool = False
    kinds: tuple[str, ...] = ALL_KINDS
    constants: str = "first"


@dataclass(frozen=True)
class PatternsConfig:
    linkage: tuple[str, ...] = DEFAULT_LINKAGE
    conventions: tuple[str, ...] = DEFAULT_CONVENTIONS


@dataclass(frozen=True)
class FilesConfig:
    max_input_bytes: int = 8_000_000
    encoding: str = "latin-1"


@dataclass(frozen=True)
class LoggingConfig:
    progress: bool = False
    quiet: bool = False
    verbose: bool = False
    log_file: str | None = None


@dataclass(frozen=True)
class Config:
    rules_path: str = ""
    input_path: str = ""
    output_path: str = ""
    config_path: str | None = None

    extract: ExtractConfig = field(default_factory=ExtractConfig)
    patterns: PatternsConfig = field(default_factory=PatternsConfig)
    files: FilesConfig = field(default_factory=FilesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


def _comma_list(raw: str) -> list[str]:
    return [x.strip() for x in raw.split(",") if x.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="glextract",
        description="Extract GL function prototypes and constants from a header into macro calls",
        epilog=USAGE_NOTES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("rules", help="Rule definition file")
    p.add_argument("input", help="Header to scan")
    p.add_argument("output", help="Generated macro file")
    p.add_argument("--config", dest="config_path")

    p.add_argument("-a", "--append", action="store_true", help="Keep the output file and skip names it already has")
    p.add_argument("--kinds", help="Comma-separated: define,method,const")
    p.add_argument("-d", "--define", action="store_true", help="Emit GLDEFINE lines")
    p.add_argument("-m", "--method", action="store_true", help="Emit DEF_GLMETHOD lines")
    p.add_argument("-c", "--const", action="store_true", help="Emit DEF_GLCONST lines")
    p.add_argument("--constants", choices=["first", "last"], help="Write constants before or after declarations")

    p.add_argument("--linkage", help="Comma-separated API linkage keywords")
    p.add_argument("--conventions", help="Comma-separated calling-convention keywords")

    p.add_argument("--max-input-bytes", type=int)
    p.add_argument("--encoding")

    p.add_argument("--progress", action="store_true", default=None)
    p.add_argument("--quiet", action="store_true")
    p.add_argument("--verbose", action="store_true")
    p.add_argument("--log-file")
    return p


def _merge_layer(dst: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    # None means "not set by this layer" and never masks a lower layer.
    for k, v in src.items():
        if v is None:
            continue
        if isinstance(v, dict):
            if not isinstance(dst.get(k), dict):
                dst[k] = {}
            _merge_layer(dst[k], v)
        else:
            dst[k] = v
    return dst


def _discover_config_path(rules_path: str) -> Path | None:
    candidates = [
        Path(rules_path).parent / "glextract.toml",
        Path("./glextract.toml"),
        Path("./.glextract.toml"),
        Path.home() / ".config" / "glextract" / "config.toml",
    ]
    for c in candidates:
        if c.exists():
            return c
    return None


def _load_toml(path: Path | None) -> dict[str, Any]:
    if not path:
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _parse_env_value(raw: str) -> Any:
    low = raw.lower()
    if low in {"true", "false"}:
        return low == "true"
    try:
        if "." in raw:
            return float(raw)
        return int(raw)
    except ValueError:
        if "," in raw:
            return _comma_list(raw)
        return raw


def _load_env_overrides() -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in os.environ.items():
        if not k.startswith("GLEXTRACT_"):
            continue
        key = k[len("GLEXTRACT_") :].lower()
        parts = key.split("__")
        cur = out
        for part in parts[:-1]:
            cur = cur.setdefault(part, {})
        cur[parts[-1]] = _parse_env_value(v)
    return out


def _apply_cli_overrides(data: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    cli: dict[str, Any] = {
        "rules_path": args.rules,
        "input_path": args.input,
        "output_path": args.output,
        "config_path": args.config_path,
    }

    def sec(section: str) -> dict[str, Any]:
        return cli.setdefault(section, {})

    if args.append:
        sec("extract")["append"] = True
    toggled = [k for k, on in ((KIND_DEFINE, args.define), (KIND_METHOD, args.method), (KIND_CONST, args.const)) if on]
    if toggled:
        sec("extract")["kinds"] = toggled
    elif args.kinds is not None:
        sec("extract")["kinds"] = _comma_list(args.kinds)
    if args.linkage is not None:
        sec("patterns")["linkage"] = _comma_list(args.linkage)
    if args.conventions is not None:
        sec("patterns")["conventions"] = _comma_list(args.conventions)

    sec("extract")["constants"] = args.constants
    sec("files")["max_input_bytes"] = args.max_input_bytes
    sec("files")["encoding"] = args.encoding
    sec("logging")["log_file"] = args.log_file

    if args.progress is True:
        sec("logging")["progress"] = True
    if args.quiet:
        sec("logging")["quiet"] = True
    if args.verbose:
        sec("logging")["verbose"] = True

    return _merge_layer(data, cli)


def _as_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(_comma_list(value))
    return tuple(value)


def _section(d: dict[str, Any], name: str, tuple_keys: tuple[str, ...] = ()) -> dict[str, Any]:
    sec = dict(d.get(name, {}))
    for key in tuple_keys:
        if key in sec:
            sec[key] = _as_tuple(sec[key])
    return sec


def _from_dict(d: dict[str, Any]) -> Config:
    try:
        return Config(
            rules_path=d.get("rules_path", ""),
            input_path=d.get("input_path", ""),
            output_path=d.get("output_path", ""),
            config_path=d.get("config_path"),
            extract=ExtractConfig(**_section(d, "extract", ("kinds",))),
            patterns=PatternsConfig(**_section(d, "patterns", ("linkage", "conventions"))),
            files=FilesConfig(**_section(d, "files")),
            logging=LoggingConfig(**_section(d, "logging")),
        )
    except TypeError as e:
        raise ConfigError(f"Unknown configuration key: {e}") from e


def _is_single_byte(encoding: str) -> bool:
    if len("\x00".encode(encoding)) != 1:
        return False
    # Multibyte codecs fold at least one of these byte pairs into a single character.
    for pair in (b"\xc3\xa9", b"\x82\xa0", b"\xa4\xa2", b"\x81\x40"):
        try:
            if len(pair.decode(encoding)) != 2:
                return False
        except UnicodeDecodeError:
            continue
    return True


def validate_config(cfg: Config) -> Config:
    if not cfg.extract.kinds:
        raise ConfigError("extract.kinds must name at least one of define,method,const")
    for kind in cfg.extract.kinds:
        if kind not in ALL_KINDS:
            raise ConfigError(f"Unsupported emission kind: {kind}")
    if cfg.extract.constants not in {"first", "last"}:
        raise ConfigError("extract.constants must be first|last")
    if not cfg.patterns.linkage:
        raise ConfigError("patterns.linkage must not be empty")
    if not cfg.patterns.conventions:
        raise ConfigError("patterns.conventions must not be empty")
    if cfg.files.max_input_bytes <= 0:
        raise ConfigError("files.max_input_bytes must be > 0")
    try:
        single_byte = _is_single_byte(cfg.files.encoding)
    except LookupError as e:
        raise ConfigError(f"Unknown encoding: {cfg.files.encoding}") from e
    if not single_byte:
        raise ConfigError(f"files.encoding must be a single-byte codec, got {cfg.files.encoding}")
    return cfg


def resolve_config(args: argparse.Namespace) -> Config:
    data: dict[str, Any] = {}

    config_path = Path(args.config_path) if args.config_path else _discover_config_path(args.rules)
    if config_path:
        _merge_layer(data, _load_toml(config_path))
        data["config_path"] = str(config_path)

    _merge_layer(data, _load_env_overrides())
    _apply_cli_overrides(data, args)

    return validate_config(_from_dict(data))
