"""Command line entrypoint for running accessibility conformance checks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from webconformance import CheckCatalog, HarnessConfig, HarnessError, build_catalog, build_runner, configure_logging
from webconformance.catalog import CATEGORY_NOTES
from webconformance.report import render_text, write_reports

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run accessibility conformance checks against a web page",
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="URL of the page under test (default: the configured target).",
    )
    parser.add_argument("--config", type=Path, help="Path to a JSON harness configuration file.")
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        metavar="NAME",
        help="Only run checks in this category. Repeatable.",
    )
    parser.add_argument(
        "--check",
        action="append",
        default=[],
        metavar="NAME",
        help="Only run the check with this name or 'category::name' id. Repeatable.",
    )
    parser.add_argument("--catalog", type=Path, help="YAML file with extra scan checks.")
    parser.add_argument(
        "--browser",
        choices=("chromium", "firefox", "webkit"),
        help="Browser engine to drive (default: chromium).",
    )
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    parser.add_argument("--report-dir", type=Path, help="Directory for JSON and HTML reports.")
    parser.add_argument("--no-report", action="store_true", help="Do not write report files.")
    parser.add_argument("--log-level", help="Python logging level (default: INFO)")
    parser.add_argument("--list", action="store_true", help="List the selected checks and exit.")
    return parser.parse_args(argv)


def _list_checks(catalog: CheckCatalog) -> List[str]:
    lines: List[str] = []
    for category, checks in catalog.by_category().items():
        note = CATEGORY_NOTES.get(category)
        lines.append(f"{category} ({note})" if note else category)
        lines.extend(f"  {check.node_id}" for check in checks)
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    try:
        config = HarnessConfig.load(
            args.config,
            target_url=args.target,
            browser=args.browser,
            headless=False if args.headed else None,
            report_dir=args.report_dir,
            catalog_path=args.catalog,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(level=config.log_level)

    try:
        catalog = build_catalog(config).select(
            categories=args.category or None,
            names=args.check or None,
        )
    except HarnessError as exc:
        print(f"Invalid catalog selection: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if args.list:
        print("\n".join(_list_checks(catalog)))
        return EXIT_PASSED

    with build_runner(config) as runner:
        report = runner.run(catalog)

    sys.stdout.write(render_text(report))
    if not args.no_report:
        for kind, path in write_reports(report, config.report_dir).items():
            print(f"{kind} report: {path}")
    return EXIT_PASSED if report.passed else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
