from __future__ import annotations

from typing import Any


class GlExtractError(Exception):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


# --- File errors ---

class CannotOpenInput(GlExtractError):
    def __init__(self, path: str, reason: str = "unknown error"):
        super().__init__(
            f"cannot open input header '{path}': {reason}",
            details={"path": path, "reason": reason},
        )


class CannotOpenDefinitionStream(GlExtractError):
    def __init__(self, path: str, reason: str = "unknown error"):
        super().__init__(
            f"cannot open rule definition file '{path}': {reason}",
            details={"path": path, "reason": reason},
        )


class CannotOpenOutput(GlExtractError):
    def __init__(self, path: str, reason: str = "unknown error"):
        super().__init__(
            f"cannot open output file '{path}': {reason}",
            details={"path": path, "reason": reason},
        )


class InputTooLarge(GlExtractError):
    def __init__(self, path: str, size: int, limit: int):
        super().__init__(
            f"input header '{path}' is {size} bytes, limit is {limit}",
            details={"path": path, "size": size, "limit": limit},
        )


# --- Extraction errors ---

class UnterminatedRegion(GlExtractError):
    def __init__(self, guard: str, end_pattern: str, offset: int):
        super().__init__(
            f"rule '{guard}': no match for end pattern {end_pattern!r} after offset {offset}",
            details={"guard": guard, "end_pattern": end_pattern, "offset": offset},
        )


class InvalidRule(GlExtractError):
    def __init__(self, reason: str, line: int | None = None):
        msg = f"invalid rule: {reason}"
        if line is not None:
            msg = f"invalid rule at line {line}: {reason}"
        super().__init__(msg, details={"reason": reason, "line": line})


# --- Configuration / usage errors ---

class ConfigError(GlExtractError):
    pass


class UsageError(GlExtractError):
    pass
