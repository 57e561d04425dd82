from __future__ import annotations

from glextract.dedup.emitted import DedupController


def build_summary(dedup: DedupController) -> dict:
    return {
        "functions": {"accepted": dedup.functions.accepted, "skipped": dedup.functions.skipped},
        "constants": {"accepted": dedup.constants.accepted, "skipped": dedup.constants.skipped},
    }


def status_line(dedup: DedupController) -> str:
    s = build_summary(dedup)
    return (
        f"functions: {s['functions']['accepted']} accepted, {s['functions']['skipped']} skipped; "
        f"constants: {s['constants']['accepted']} accepted, {s['constants']['skipped']} skipped"
    )
