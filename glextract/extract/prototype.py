from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from glextract.patterns.library import PatternLibrary
from glextract.scanner.range_scanner import Region

log = logging.getLogger("glextract")


@dataclass(frozen=True)
class ArgPair:
    type_name: str
    name: str


@dataclass(frozen=True)
class FunctionRecord:
    name: str
    return_type: str
    arguments: tuple[ArgPair, ...] = field(default_factory=tuple)

    @property
    def returns_value(self) -> bool:
        return self.return_type != "void"


def parse_arguments(args_text: str, argument_re: re.Pattern[str]) -> tuple[ArgPair, ...] | None:
    # None when some part of the list is outside the argument grammar.
    if args_text.strip() in {"", "void"}:
        return ()
    out: list[ArgPair] = []
    pos = 0
    while args_text[pos:].strip():
        m = argument_re.match(args_text, pos)
        if m is None:
            return None
        pos = m.end()
        out.append(ArgPair(type_name=m.group("type").rstrip(), name=m.group("name")))
    if out and out[0].type_name == "void":
        return ()
    return tuple(out)


def extract_prototypes(text: str, region: Region, patterns: PatternLibrary) -> Iterator[FunctionRecord]:
    pos = region.start
    while True:
        m = patterns.prototype.search(text, pos, region.end)
        if m is None:
            return
        pos = m.end()
        arguments = parse_arguments(m.group("args"), patterns.argument)
        if arguments is None:
            log.warning("Skipping %s: cannot parse argument list (%s)", m.group("name"), m.group("args").strip())
            continue
        yield FunctionRecord(name=m.group("name"), return_type=m.group("ret"), arguments=arguments)
