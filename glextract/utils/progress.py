from __future__ import annotations


def rule_progress(enabled: bool, current: int, total: int, guard: str, accepted: int, skipped: int) -> None:
    if not enabled:
        return
    print(f"[{current}/{total}] {guard}: {accepted} accepted, {skipped} skipped", flush=True)
