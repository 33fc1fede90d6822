"""
Analyze one address from the command line and print the result as JSON.

Usage:
    python -m backend_chainrisk.tools.analyze_address <address> [--chain bnb] [--full]

Exit codes: 0 ok, 2 bad input, 1 analysis failed.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from backend_chainrisk.analytics.analysis_pipeline import build_pipeline
from backend_chainrisk.chains.models import ChainKind
from backend_chainrisk.chainrisk_logging import get_logger
from backend_chainrisk.config.settings import get_settings
from backend_chainrisk.core.exceptions import AnalysisFailedError, InputError

logger = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run investigator-risk and user-safety analysis for one address.")
    ap.add_argument("address", help="Address to analyze")
    ap.add_argument(
        "--chain",
        default=None,
        choices=[c.value for c in ChainKind],
        help="Chain override (detected from address shape if omitted)",
    )
    ap.add_argument("--full", action="store_true", help="Include the displayed transaction list in output")
    args = ap.parse_args(argv)

    pipeline = build_pipeline(get_settings())
    try:
        result = pipeline.analyze(args.address, args.chain)
    except InputError as e:
        print(f"[analyze_address] {e.message}", file=sys.stderr)
        return 2
    except AnalysisFailedError as e:
        logger.error("analyze_address_failed", error=str(e.cause))
        print(f"[analyze_address] {e.message}", file=sys.stderr)
        return 1

    out = result.to_dict()
    if not args.full:
        out.pop("transactions", None)
    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
