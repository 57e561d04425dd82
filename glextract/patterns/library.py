from __future__ import annotations

import re
from dataclasses import dataclass

from glextract.errors import InvalidRule

SUBPATTERNS: dict[str, str] = {
    # identifier
    "ALNUM": r"[A-Za-z0-9_]+",
    # return type tokens, reluctant so it stops before the calling convention
    "RET": r"[A-Za-z0-9_ *&]+?",
    # argument type tokens, reluctant so the trailing identifier stays out of it
    "ARG": r"[A-Za-z0-9_][A-Za-z0-9_\s*&]*?",
    "TO_RPAREN": r"[^)]*",
    "TO_COMMA": r"[^,]*",
}

DEFAULT_LINKAGE = ("WINGDIAPI", "GLAPI", "GL_APICALL")
DEFAULT_CONVENTIONS = ("APIENTRY", "GL_APIENTRY", "GLAPIENTRY")

PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

PROTOTYPE_TEMPLATE = (
    r"^[ \t]*(?:${LINKAGE})\s+(?P<ret>${RET})\s*(?:${CONVENTION})\s+(?P<name>${ALNUM})\s*"
    r"\((?P<args>${TO_RPAREN})\)"
)
ARGUMENT_TEMPLATE = r"\s*(?P<type>${ARG}[\s*&])(?P<name>${ALNUM})\s*(?:,|\Z)"
CONSTANT_TEMPLATE = r"^[ \t]*#[ \t]*define[ \t]+(?P<name>${ALNUM})[ \t]+0[xX](?P<value>${ALNUM})"
EMITTED_DEFINE_TEMPLATE = r"^[ \t]*GLDEFINE\([ \t]*(?P<name>${ALNUM})"
EMITTED_METHOD_TEMPLATE = r"^[ \t]*DEF_GLMETHOD\(${TO_COMMA},${TO_COMMA},[ \t]*(?P<name>${ALNUM})"
EMITTED_CONST_TEMPLATE = r"^[ \t]*DEF_GLCONST\([ \t]*(?P<name>${ALNUM})"


def expand_template(template: str, extra: dict[str, str] | None = None) -> str:
    table = dict(SUBPATTERNS)
    if extra:
        table.update(extra)

    def _sub(m: re.Match[str]) -> str:
        key = m.group(1)
        if key not in table:
            raise InvalidRule(f"unknown placeholder ${{{key}}} in pattern {template!r}")
        return table[key]

    return PLACEHOLDER_RE.sub(_sub, template)


def compile_template(template: str, extra: dict[str, str] | None = None, flags: int = re.MULTILINE) -> re.Pattern[str]:
    expanded = expand_template(template, extra)
    try:
        return re.compile(expanded, flags)
    except re.error as e:
        raise InvalidRule(f"pattern {template!r} does not compile: {e}") from e


def _alternation(words: tuple[str, ...]) -> str:
    # Longest first so a keyword never shadows a longer one sharing its prefix.
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


@dataclass(frozen=True)
class PatternLibrary:
    prototype: re.Pattern[str]
    argument: re.Pattern[str]
    constant: re.Pattern[str]
    emitted_define: re.Pattern[str]
    emitted_method: re.Pattern[str]
    emitted_const: re.Pattern[str]


def build_pattern_library(
    linkage: tuple[str, ...] = DEFAULT_LINKAGE,
    conventions: tuple[str, ...] = DEFAULT_CONVENTIONS,
) -> PatternLibrary:
    keywords = {"LINKAGE": _alternation(linkage), "CONVENTION": _alternation(conventions)}
    return PatternLibrary(
        prototype=compile_template(PROTOTYPE_TEMPLATE, keywords),
        argument=compile_template(ARGUMENT_TEMPLATE),
        constant=compile_template(CONSTANT_TEMPLATE),
        emitted_define=compile_template(EMITTED_DEFINE_TEMPLATE),
        emitted_method=compile_template(EMITTED_METHOD_TEMPLATE),
        emitted_const=compile_template(EMITTED_CONST_TEMPLATE),
    )
