"""Binds a browser session and a rule selector into one analysis."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from playwright.sync_api import Page

from .errors import AnalysisError
from .models import ScanResult, Violation
from .selector import RuleSelector
from .session import BrowserSession
from .tracing import log_event, trace


class AnalysisEngine(Protocol):
    """The capability the scanner consumes; :class:`~webconformance.engine.AxeEngine` implements it."""

    def rules(self, page: Page) -> Mapping[str, Tuple[str, ...]]: ...

    def analyze(self, page: Page, options: Mapping[str, Any], timeout_ms: float) -> Dict[str, Any]: ...


class AccessibilityScanner:
    """Run one selector against one session and normalise the engine output.

    Violations keep the engine's order and are never de-duplicated, so the
    same document and selector always produce the same list.
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        *,
        timeout_ms: float = 60_000,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.engine = engine
        self.timeout_ms = timeout_ms
        self.logger = logger or logging.getLogger("scanner")

    def scan(self, session: BrowserSession, selector: RuleSelector) -> ScanResult:
        selector.validate()
        with trace(
            "scanner.scan",
            logger=self.logger,
            target=session.target,
            selector=selector.describe(),
        ) as span:
            effective = selector.resolve(self.engine.rules(session.page))
            payload = self.engine.analyze(session.page, selector.to_axe_options(), self.timeout_ms)
            violations = tuple(Violation.from_axe(item) for item in payload["violations"])
            self._check_selection(violations, effective)
            span.record(rules=len(effective), violations=len(violations))

        result = ScanResult(
            url=str(payload.get("url") or session.url),
            selector=selector,
            violations=violations,
            engine_version=payload.get("version"),
        )
        log_event(
            self.logger,
            logging.INFO,
            "scanner.result",
            url=result.url,
            passed=result.passed,
            rule_ids=result.rule_ids,
        )
        return result

    @staticmethod
    def _check_selection(violations: Tuple[Violation, ...], effective: Tuple[str, ...]) -> None:
        allowed = set(effective)
        outside = [violation.id for violation in violations if violation.id not in allowed]
        if outside:
            raise AnalysisError(
                f"Engine reported rules outside the selection: {', '.join(outside)}"
            )


__all__ = ["AccessibilityScanner", "AnalysisEngine"]
