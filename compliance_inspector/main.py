import sys
from pathlib import Path
from typing import List, Optional
from compliance_inspector.cli.cli import parse_args
from compliance_inspector.config.scoring_loader import load_scoring_profile
from compliance_inspector.core.scanner import Scanner
from compliance_inspector.exceptions import ComplianceInspectorError
from compliance_inspector.reports.markdown_reporter import MarkdownReporter
from compliance_inspector.reports.report_builder import build_scan_report
from compliance_inspector.reports.report_saver import ReportSaver
from compliance_inspector.rules.catalog import RuleCatalog
from compliance_inspector.rules.rule_loader import load_rules_from_yaml
from compliance_inspector.scoring.scorer import ComplianceScorer
from compliance_inspector.utils.fs_utils import create_run_directory
from compliance_inspector.utils.logger import init_logging, log_scan_debug

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BELOW_THRESHOLD = 2


def configure_logging(run_dir: Optional[Path], verbose: bool):
    log_path = run_dir / "full.log" if run_dir else None
    logger = init_logging(verbose=verbose, log_path=log_path)
    logger.debug("[✓] Logger initialized.")
    return logger


def print_rules(catalog: RuleCatalog) -> None:
    for rule in catalog.list_rules():
        print(f"{rule.id:<10} {rule.severity:<9} {rule.category:<15} {rule.title}")


def load_catalog(args) -> RuleCatalog:
    catalog = load_rules_from_yaml(args.rules)
    if args.only or args.skip:
        try:
            catalog = catalog.select(include=args.only, exclude=args.skip)
        except KeyError as ex:
            raise ComplianceInspectorError(str(ex.args[0])) from ex
    return catalog


def run_scan(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    configure_logging(None, verbose=args.verbose)

    # Step 1: Load configuration
    catalog = load_catalog(args)
    if args.list_rules:
        print_rules(catalog)
        return EXIT_OK
    scorer = ComplianceScorer(load_scoring_profile(args.scoring_profile))

    # Step 2: Open the target before anything is written
    scanner = Scanner(
        catalog,
        parallel=args.parallel,
        max_workers=args.max_workers,
        rule_timeout=args.rule_timeout
    )
    target = scanner.open_target(args.target)

    # Step 3: Prepare run folder and file logging
    run_dir, _ = create_run_directory(args.output_dir)
    logger = configure_logging(run_dir, verbose=args.verbose)

    # Step 4: Scan
    logger.info(f"[*] Scanning {args.target} with {len(catalog)} rules...")
    findings = scanner.scan_target(target)

    # Step 5: Score and report
    report = build_scan_report(str(args.target), findings, scorer)
    log_scan_debug(
        logger, report.target, report.score, report.label,
        scorer.status_counts(findings),
        failed_rules=[f.rule_id for f in findings if not f.passed]
    )

    markdown = MarkdownReporter(scorer=scorer).render(report)
    saver = ReportSaver(run_dir=run_dir)
    if args.format in ("markdown", "all"):
        saver.save_markdown(report, markdown)
    if args.format in ("json", "all"):
        saver.save_json(report)
        saver.save_findings_csv(report)

    if args.stdout:
        print(markdown)
    print(f"Compliance score: {report.score:.2f}% ({report.label}) → {run_dir}")

    if args.fail_under is not None and report.score < args.fail_under:
        logger.warning(f"[!] Score {report.score:.2f}% is below --fail-under {args.fail_under}")
        return EXIT_BELOW_THRESHOLD
    return EXIT_OK


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the compliance scan.
    Exits 0 on success, 1 on error and 2 when the score is below --fail-under.
    """
    try:
        sys.exit(run_scan(argv))
    except Exception as ex:
        print(f"[ERROR] {type(ex).__name__}: {ex}", file=sys.stderr)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
