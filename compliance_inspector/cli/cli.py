import argparse
from pathlib import Path
from typing import List, Optional
from compliance_inspector.config.defaults import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RULES_PATH,
    DEFAULT_SCORING_PROFILE_PATH,
)


def _score(value: str) -> float:
    score = float(value)
    if not 0.0 <= score <= 100.0:
        raise argparse.ArgumentTypeError("score must be between 0 and 100")
    return score


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("value must be positive")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compliance-inspector",
        description="Compliance Inspector: scan a repository against a compliance rule catalog"
    )

    parser.add_argument("--target", type=Path,
                        help="Repository directory or archive (.zip, .tar, .tar.gz) to scan")
    parser.add_argument("--rules", type=Path, default=DEFAULT_RULES_PATH,
                        help="Rule catalog YAML (default: bundled catalog)")
    parser.add_argument("--scoring-profile", type=Path, default=DEFAULT_SCORING_PROFILE_PATH,
                        help="Scoring profile YAML (default: bundled profile)")
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR,
                        help="Directory to store reports and logs")
    parser.add_argument("--format", choices=["markdown", "json", "all"], default="all",
                        help="Report formats to write (default: all)")
    parser.add_argument("--only", nargs="+", metavar="RULE_ID", default=None,
                        help="Evaluate only these rule ids")
    parser.add_argument("--skip", nargs="+", metavar="RULE_ID", default=None,
                        help="Skip these rule ids")
    parser.add_argument("--parallel", action="store_true",
                        help="Evaluate rules on a thread pool")
    parser.add_argument("--max-workers", type=int, default=DEFAULT_MAX_WORKERS,
                        help="Thread pool size for --parallel")
    parser.add_argument("--rule-timeout", type=_positive_float, default=None,
                        help="Seconds before a single rule is reported as unknown")
    parser.add_argument("--fail-under", type=_score, default=None,
                        help="Exit with status 2 when the score is below this value")
    parser.add_argument("--list-rules", action="store_true",
                        help="Print the rule catalog and exit")
    parser.add_argument("--stdout", action="store_true",
                        help="Also print the Markdown report to standard output")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable verbose logging to console and log file")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.target is None and not args.list_rules:
        parser.error("--target is required unless --list-rules is given")
    return args
