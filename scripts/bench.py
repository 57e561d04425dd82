from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Allow running as `python scripts/bench.py` without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from glextract.config import Config, FilesConfig
from glextract.dedup.emitted import DedupController
from glextract.driver import extract_lines, patterns_for, read_input
from glextract.rules import compile_rule, read_rules


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Benchmark glextract extraction throughput")
    p.add_argument("header")
    p.add_argument("rules")
    p.add_argument("--repeat", type=int, default=1)
    p.add_argument("--max-input-bytes", type=int, default=FilesConfig().max_input_bytes)
    return p


def main() -> None:
    args = build_parser().parse_args()
    cfg = Config(files=FilesConfig(max_input_bytes=args.max_input_bytes))

    t0 = time.perf_counter()
    patterns = patterns_for(cfg)
    rules = [compile_rule(r) for r in read_rules(Path(args.rules))]
    text = read_input(Path(args.header), cfg)

    lines: list[str] = []
    dedup = DedupController()
    for _ in range(max(1, args.repeat)):
        lines = []
        dedup = DedupController()
        extract_lines(text, rules, cfg, patterns, dedup, lines.extend)
    elapsed = max(1e-9, time.perf_counter() - t0)
    scanned = len(text) * max(1, args.repeat)

    print(f"rules: {len(rules)}")
    print(f"functions: {dedup.functions.accepted}")
    print(f"constants: {dedup.constants.accepted}")
    print(f"lines: {len(lines)}")
    print(f"bytes: {scanned}")
    print(f"bytes/sec: {scanned/elapsed:.2f}")


if __name__ == "__main__":
    main()
