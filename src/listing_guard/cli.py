"""CLI interface for listing-guard — designed to be called by a host app.

Usage:
    # Full evaluation (stdin: listing text, stdout: JSON result)
    echo 'URGENT SALE!!! call 555-123-4567' | \
        python -m listing_guard.cli evaluate --hour 12 --today 40

    # Sanitized text only
    echo 'Rolex, a steal!!!' | python -m listing_guard.cli sanitize

    # Findings only (stdout: JSON array)
    echo 'dm for price' | python -m listing_guard.cli detect

    # Rate-limit decision for a usage snapshot
    python -m listing_guard.cli rate-limit --hour 35 --today 120

Rules come from the built-in defaults unless --rules points at a YAML file.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys

from .config import create_engine, load_from_yaml
from .engine import DEFAULT_MAX_INPUT_LENGTH, ComplianceEngine
from .errors import ListingGuardError
from .types import UsageCounts


DEFAULT_RULES = os.environ.get("LISTING_GUARD_RULES", "")


def _build_engine(args: argparse.Namespace) -> ComplianceEngine:
    config = load_from_yaml(args.rules) if args.rules else {}
    if args.max_length:
        config["max_input_length"] = args.max_length
    return create_engine(config, market=args.market)


def _usage(args: argparse.Namespace) -> UsageCounts | None:
    if args.hour is None and args.today is None:
        return None
    return UsageCounts(copies_last_hour=args.hour or 0, copies_today=args.today or 0)


def _dump(data: object) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_evaluate(args: argparse.Namespace) -> None:
    """Evaluate listing text on stdin."""
    engine = _build_engine(args)
    result = engine.evaluate(sys.stdin.read(), _usage(args))
    _dump(result.to_dict())


def cmd_sanitize(args: argparse.Namespace) -> None:
    """Write the sanitized form of stdin."""
    engine = _build_engine(args)
    sys.stdout.write(engine.sanitize(sys.stdin.read()))
    sys.stdout.write("\n")


def cmd_detect(args: argparse.Namespace) -> None:
    """List findings for stdin as JSON."""
    engine = _build_engine(args)
    check = engine.pre_check(sys.stdin.read())
    _dump({
        "passed": check.passed,
        "risk_score": check.risk_score,
        "findings": [f.to_dict() for f in check.findings],
    })


def cmd_rate_limit(args: argparse.Namespace) -> None:
    """Evaluate a usage snapshot."""
    engine = _build_engine(args)
    usage = _usage(args) or UsageCounts()
    _dump(engine.check_rate_limit(usage).to_dict())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="listing-guard",
        description="Spam-compliance checks for marketplace listings",
    )
    parser.add_argument("--rules", default=DEFAULT_RULES, help="YAML rules file")
    parser.add_argument("--market", default=None, help="Market override from the rules file")
    parser.add_argument(
        "--max-length", type=int, default=None,
        help=f"Reject input longer than this (default {DEFAULT_MAX_INPUT_LENGTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("evaluate", "Detect, sanitize and rate-limit (text on stdin)"),
        ("sanitize", "Sanitize text on stdin"),
        ("detect", "Report findings for text on stdin"),
        ("rate-limit", "Evaluate usage counts"),
    ):
        p = sub.add_parser(name, help=help_text)
        if name in ("evaluate", "rate-limit"):
            p.add_argument("--hour", type=int, default=None, help="Copies in the last hour")
            p.add_argument("--today", type=int, default=None, help="Copies today")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cmds = {
        "evaluate": cmd_evaluate,
        "sanitize": cmd_sanitize,
        "detect": cmd_detect,
        "rate-limit": cmd_rate_limit,
    }
    try:
        cmds[args.command](args)
    except ListingGuardError as exc:
        sys.stderr.write(f"listing-guard: {exc}\n")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
