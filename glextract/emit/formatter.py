from __future__ import annotations

from glextract.extract.constants import ConstantRecord
from glextract.extract.prototype import FunctionRecord

KIND_DEFINE = "define"
KIND_METHOD = "method"
KIND_CONST = "const"
ALL_KINDS = (KIND_DEFINE, KIND_METHOD, KIND_CONST)
FUNCTION_KINDS = (KIND_DEFINE, KIND_METHOD)


def render_define(record: FunctionRecord) -> str:
    return f"GLDEFINE({record.name},PFN{record.name.upper()}PROC)"


def render_method(record: FunctionRecord) -> str:
    types = "".join(f"({a.type_name})" for a in record.arguments) or "()"
    names = "".join(f"({a.name})" for a in record.arguments) or "()"
    flag = 1 if record.returns_value else 0
    return f"DEF_GLMETHOD({record.return_type}, {flag}, {record.name}, {types}, {names})"


def render_constant(record: ConstantRecord) -> str:
    return f"DEF_GLCONST({record.name}, 0x{record.hex_value})"


def render_function(record: FunctionRecord, kinds: tuple[str, ...]) -> list[str]:
    lines: list[str] = []
    if KIND_DEFINE in kinds:
        lines.append(render_define(record))
    if KIND_METHOD in kinds:
        lines.append(render_method(record))
    return lines


def wrap_guard(guard: str, lines: list[str]) -> list[str]:
    if not lines:
        return []
    return [f"#ifdef {guard}", *lines, "#endif"]
