from __future__ import annotations

import logging
import sys

from glextract.config import build_parser, resolve_config
from glextract.driver import RuleOutcome, run_extraction
from glextract.errors import GlExtractError, UsageError
from glextract.reporting.summary import status_line
from glextract.utils.logging import configure_logging
from glextract.utils.progress import rule_progress

log = logging.getLogger("glextract")


def run() -> int:
    parser = build_parser()
    if len(sys.argv) <= 1:
        parser.print_help()
        return 0

    try:
        args = parser.parse_args()
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"glextract: error: {e}", file=sys.stderr)
        return 1

    try:
        cfg = resolve_config(args)
    except GlExtractError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    configure_logging(cfg.logging.verbose, cfg.logging.quiet, cfg.logging.log_file)
    progress_enabled = cfg.logging.progress and not cfg.logging.quiet

    def on_rule(current: int, total: int, outcome: RuleOutcome) -> None:
        rule_progress(progress_enabled, current, total, outcome.guard, outcome.accepted, outcome.skipped)

    try:
        result = run_extraction(cfg, on_rule=on_rule)
    except GlExtractError as e:
        log.debug("Run aborted", exc_info=True)
        print(f"glextract: error: {e}", file=sys.stderr)
        return 1

    print(status_line(result.dedup))
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
