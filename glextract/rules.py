from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from glextract.errors import CannotOpenDefinitionStream, InvalidRule
from glextract.patterns.library import compile_template


@dataclass(frozen=True)
class ExtractionRule:
    macro_guard_name: str
    begin_pattern: str
    end_pattern: str


@dataclass(frozen=True)
class CompiledRule:
    rule: ExtractionRule
    begin: re.Pattern[str]
    end: re.Pattern[str]

    @property
    def guard(self) -> str:
        return self.rule.macro_guard_name


def parse_rules(text: str) -> list[ExtractionRule]:
    rules: list[ExtractionRule] = []
    pending: list[str] = []
    first_line = 1
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if not line.strip():
            break
        if not pending:
            first_line = lineno
        pending.append(line)
        if len(pending) == 3:
            guard, begin, end = pending
            rules.append(ExtractionRule(macro_guard_name=guard.strip(), begin_pattern=begin, end_pattern=end))
            pending = []
    if pending:
        raise InvalidRule(f"expected guard, begin and end lines, got {len(pending)}", line=first_line)
    return rules


def read_rules(path: Path, encoding: str = "latin-1") -> list[ExtractionRule]:
    try:
        text = path.read_text(encoding=encoding)
    except OSError as e:
        raise CannotOpenDefinitionStream(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise CannotOpenDefinitionStream(str(path), f"not valid {encoding} text") from e
    return parse_rules(text)


def compile_rule(rule: ExtractionRule) -> CompiledRule:
    return CompiledRule(
        rule=rule,
        begin=compile_template(rule.begin_pattern),
        end=compile_template(rule.end_pattern),
    )
