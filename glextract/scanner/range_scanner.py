from __future__ import annotations

import re
from dataclasses import dataclass

from glextract.errors import UnterminatedRegion


@dataclass(frozen=True)
class Region:
    start: int
    end: int
    # Cursor position right after the end marker.
    resume: int


def find_region(text: str, begin: re.Pattern[str], end: re.Pattern[str], pos: int, guard: str = "") -> Region | None:
    m = begin.search(text, pos)
    if m is None:
        return None
    e = end.search(text, m.end())
    if e is None:
        raise UnterminatedRegion(guard, end.pattern, m.end())
    return Region(start=m.end(), end=e.start(), resume=max(e.end(), m.end()))
