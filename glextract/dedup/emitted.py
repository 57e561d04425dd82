from __future__ import annotations

import logging
from dataclasses import dataclass, field

from glextract.patterns.library import PatternLibrary

log = logging.getLogger("glextract")


@dataclass
class EmittedNameSets:
    functions: set[str] = field(default_factory=set)
    constants: set[str] = field(default_factory=set)

    @classmethod
    def from_artifact(cls, text: str, patterns: PatternLibrary) -> EmittedNameSets:
        names = cls()
        for pattern in (patterns.emitted_define, patterns.emitted_method):
            names.functions.update(m.group("name") for m in pattern.finditer(text))
        names.constants.update(m.group("name") for m in patterns.emitted_const.finditer(text))
        return names


@dataclass
class Tally:
    accepted: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.accepted + self.skipped


class DedupController:
    def __init__(self, names: EmittedNameSets | None = None):
        self.names = names if names is not None else EmittedNameSets()
        self.functions = Tally()
        self.constants = Tally()

    def _gate(self, seen: set[str], tally: Tally, name: str, kind: str) -> bool:
        if name in seen:
            tally.skipped += 1
            log.debug("Skipping already emitted %s %s", kind, name)
            return False
        seen.add(name)
        tally.accepted += 1
        return True

    def accept_function(self, name: str) -> bool:
        return self._gate(self.names.functions, self.functions, name, "function")

    def accept_constant(self, name: str) -> bool:
        return self._gate(self.names.constants, self.constants, name, "constant")
