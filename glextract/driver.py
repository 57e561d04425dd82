from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from glextract.config import Config
from glextract.dedup.emitted import DedupController, EmittedNameSets
from glextract.emit.formatter import FUNCTION_KINDS, KIND_CONST, render_constant, render_function, wrap_guard
from glextract.errors import CannotOpenInput, CannotOpenOutput, InputTooLarge
from glextract.extract.constants import extract_constants
from glextract.extract.prototype import extract_prototypes
from glextract.patterns.library import PatternLibrary, build_pattern_library
from glextract.rules import CompiledRule, compile_rule, read_rules
from glextract.scanner.range_scanner import find_region
from glextract.scanner.size_filter import within_size_limit

log = logging.getLogger("glextract")


@dataclass
class RuleOutcome:
    guard: str
    regions: int = 0
    accepted: int = 0
    skipped: int = 0


def patterns_for(cfg: Config) -> PatternLibrary:
    return build_pattern_library(cfg.patterns.linkage, cfg.patterns.conventions)


def constant_lines(text: str, patterns: PatternLibrary, dedup: DedupController) -> list[str]:
    return [render_constant(rec) for rec in extract_constants(text, patterns) if dedup.accept_constant(rec.name)]


def rule_lines(
    text: str,
    rule: CompiledRule,
    pos: int,
    patterns: PatternLibrary,
    dedup: DedupController,
    kinds: tuple[str, ...],
) -> tuple[list[str], int, RuleOutcome]:
    outcome = RuleOutcome(guard=rule.guard)
    body: list[str] = []
    while True:
        region = find_region(text, rule.begin, rule.end, pos, guard=rule.guard)
        if region is None:
            break
        outcome.regions += 1
        log.debug("Rule %s: region %d-%d", rule.guard, region.start, region.end)
        for record in extract_prototypes(text, region, patterns):
            if dedup.accept_function(record.name):
                outcome.accepted += 1
                body.extend(render_function(record, kinds))
            else:
                outcome.skipped += 1
        if region.resume <= pos:
            # Empty begin/end matches at the cursor; nothing further to consume.
            break
        pos = region.resume
    return wrap_guard(rule.guard, body), pos, outcome


def extract_lines(
    text: str,
    rules: list[CompiledRule],
    cfg: Config,
    patterns: PatternLibrary,
    dedup: DedupController,
    write: Callable[[list[str]], None],
    on_rule: Callable[[int, int, RuleOutcome], None] | None = None,
) -> list[RuleOutcome]:
    kinds = cfg.extract.kinds
    outcomes: list[RuleOutcome] = []
    with_constants = KIND_CONST in kinds
    with_functions = any(k in kinds for k in FUNCTION_KINDS)

    if with_constants and cfg.extract.constants == "first":
        write(constant_lines(text, patterns, dedup))

    if with_functions:
        pos = 0
        for idx, rule in enumerate(rules, start=1):
            lines, pos, outcome = rule_lines(text, rule, pos, patterns, dedup, kinds)
            write(lines)
            outcomes.append(outcome)
            if outcome.regions == 0:
                log.warning("Rule %s matched no region", rule.guard)
            else:
                log.info(
                    "Rule %s: %d region(s), %d accepted, %d skipped",
                    rule.guard,
                    outcome.regions,
                    outcome.accepted,
                    outcome.skipped,
                )
            if on_rule is not None:
                on_rule(idx, len(rules), outcome)

    if with_constants and cfg.extract.constants == "last":
        write(constant_lines(text, patterns, dedup))

    return outcomes


def read_input(path: Path, cfg: Config) -> str:
    try:
        if not within_size_limit(path, cfg.files.max_input_bytes):
            raise InputTooLarge(str(path), path.stat().st_size, cfg.files.max_input_bytes)
        return path.read_text(encoding=cfg.files.encoding)
    except OSError as e:
        raise CannotOpenInput(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise CannotOpenInput(str(path), f"not valid {cfg.files.encoding} text") from e


def _open_output(path: Path, cfg: Config) -> TextIO:
    # "a+" reads from the start after seek(0) and always writes at the end.
    mode = "a+" if cfg.extract.append else "w"
    try:
        return path.open(mode, encoding=cfg.files.encoding, newline="")
    except OSError as e:
        raise CannotOpenOutput(str(path), e.strerror or str(e)) from e


def _read_existing(sink: TextIO, path: Path, encoding: str) -> str:
    sink.seek(0)
    try:
        return sink.read()
    except UnicodeDecodeError as e:
        raise CannotOpenOutput(str(path), f"not valid {encoding} text") from e


def _write_lines(sink: TextIO, lines: list[str]) -> None:
    if lines:
        sink.write("".join(line + "\n" for line in lines))


def _ensure_line_start(sink: TextIO, existing: str) -> None:
    if existing and not existing.endswith("\n"):
        sink.write("\n")


@dataclass
class ExtractionResult:
    dedup: DedupController
    rules: list[RuleOutcome]


def run_extraction(cfg: Config, on_rule: Callable[[int, int, RuleOutcome], None] | None = None) -> ExtractionResult:
    patterns = patterns_for(cfg)
    rules = [compile_rule(r) for r in read_rules(Path(cfg.rules_path), cfg.files.encoding)]
    log.debug("Loaded %d rule(s) from %s", len(rules), cfg.rules_path)
    text = read_input(Path(cfg.input_path), cfg)

    with _open_output(Path(cfg.output_path), cfg) as sink:
        names = EmittedNameSets()
        if cfg.extract.append:
            existing = _read_existing(sink, Path(cfg.output_path), cfg.files.encoding)
            names = EmittedNameSets.from_artifact(existing, patterns)
            log.info(
                "Append mode: %d function(s) and %d constant(s) already in %s",
                len(names.functions),
                len(names.constants),
                cfg.output_path,
            )
            _ensure_line_start(sink, existing)
        dedup = DedupController(names)
        outcomes = extract_lines(text, rules, cfg, patterns, dedup, lambda lines: _write_lines(sink, lines), on_rule)

    return ExtractionResult(dedup=dedup, rules=outcomes)
