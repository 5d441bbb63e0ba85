"""Executes catalog checks, each in its own browser session."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from .catalog import CheckCatalog, default_catalog, load_catalog_file
from .checks import Check
from .config import HarnessConfig
from .engine import AxeEngine, AxeSource
from .errors import ConformanceViolation, HarnessError
from .models import CheckOutcome, CheckStatus, RunReport, ScanResult
from .scanner import AccessibilityScanner
from .session import PlaywrightLauncher, SessionProvider
from .tracing import elapsed_ms, log_event, trace


class CheckRunner:
    """Run checks in isolation: open a session, run, always release.

    Checks share nothing but the provider and the scanner, both of which
    hold no per-check state.
    """

    def __init__(
        self,
        provider: SessionProvider,
        scanner: AccessibilityScanner,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.provider = provider
        self.scanner = scanner
        self.logger = logger or logging.getLogger("runner")

    def __enter__(self) -> "CheckRunner":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.provider.shutdown()

    def execute(self, check: Check, target: str) -> Optional[ScanResult]:
        """Run ``check`` against ``target`` and raise on any negative outcome."""

        check.validate()
        with trace("runner.check", logger=self.logger, check=check.node_id, target=target):
            with self.provider.session(target) as session:
                return check.run(session, self.scanner)

    def run_check(self, check: Check, target: str) -> CheckOutcome:
        """Run ``check`` and record its outcome instead of raising.

        Verdict failures and harness errors are recorded; any other
        exception is a bug in the harness and propagates.
        """

        start = time.perf_counter()
        status = CheckStatus.PASSED
        error_kind: Optional[str] = None
        message = ""
        violations = ()
        try:
            self.execute(check, target)
        except ConformanceViolation as exc:
            status, error_kind, message = CheckStatus.FAILED, type(exc).__name__, str(exc)
            violations = exc.violations
        except AssertionError as exc:
            status, error_kind, message = CheckStatus.FAILED, type(exc).__name__, str(exc)
        except HarnessError as exc:
            status, error_kind, message = CheckStatus.ERROR, type(exc).__name__, str(exc)

        outcome = CheckOutcome(
            category=check.category,
            name=check.name,
            status=status,
            duration_ms=elapsed_ms(start),
            error_kind=error_kind,
            message=message,
            violations=violations,
        )
        log_event(
            self.logger,
            logging.INFO if outcome.passed else logging.WARNING,
            "runner.check.finish",
            check=outcome.node_id,
            status=outcome.status,
            error_kind=error_kind,
            violations=len(violations) or None,
            duration_ms=outcome.duration_ms,
        )
        return outcome

    def run(self, catalog: CheckCatalog) -> RunReport:
        """Run every check of ``catalog`` in order and collect a report."""

        report = RunReport(target=catalog.target)
        for check in catalog:
            report.outcomes.append(self.run_check(check, catalog.target))
        report.finished_at = datetime.now(timezone.utc)
        log_event(
            self.logger,
            logging.INFO,
            "runner.finish",
            target=catalog.target,
            passed=report.passed,
            counts=report.counts(),
        )
        return report


def build_runner(config: HarnessConfig) -> CheckRunner:
    """Wire a Playwright backed runner from ``config``."""

    launcher = PlaywrightLauncher(config.browser, headless=config.headless)
    provider = SessionProvider(
        launcher,
        navigation_timeout_ms=config.navigation_timeout_ms,
        wait_until=config.wait_until,
    )
    source = AxeSource(
        script_path=config.axe_script_path,
        script_url=config.axe_script_url,
        cache_dir=config.axe_cache_dir,
    )
    scanner = AccessibilityScanner(AxeEngine(source), timeout_ms=config.analysis_timeout_ms)
    return CheckRunner(provider, scanner)


def build_catalog(config: HarnessConfig) -> CheckCatalog:
    """Return the built-in catalog for the configured target plus any extension file."""

    catalog = default_catalog(config.target_url, element_timeout_ms=config.element_timeout_ms)
    if config.catalog_path is not None:
        catalog = catalog.extend(load_catalog_file(config.catalog_path))
    return catalog


__all__ = ["CheckRunner", "build_catalog", "build_runner"]
