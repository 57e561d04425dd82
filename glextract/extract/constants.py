from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from glextract.patterns.library import PatternLibrary


@dataclass(frozen=True)
class ConstantRecord:
    name: str
    hex_value: str  # digits after the 0x prefix, verbatim


def extract_constants(text: str, patterns: PatternLibrary) -> Iterator[ConstantRecord]:
    for m in patterns.constant.finditer(text):
        yield ConstantRecord(name=m.group("name"), hex_value=m.group("value"))
