"""Check definitions: the units the catalog holds and the runner executes."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import ElementWaitTimeoutError, SessionError
from .models import ScanResult
from .scanner import AccessibilityScanner
from .selector import RuleSelector
from .session import BrowserSession
from .verdict import assert_pass, assert_visible


class Check(ABC):
    """Abstract check: one independent verdict against a freshly opened page."""

    def __init__(self, category: str, name: str, logger: Optional[logging.Logger] = None) -> None:
        self._category = category
        self._name = name
        self._logger = logger or logging.getLogger(f"check.{category}")

    @property
    def category(self) -> str:
        """Reporting group the check belongs to."""

        return self._category

    @property
    def name(self) -> str:
        """Human readable check name, unique within its category."""

        return self._name

    @property
    def node_id(self) -> str:
        return f"{self._category}::{self._name}"

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def validate(self) -> None:
        """Reject authoring defects before any browser work; no-op by default."""

    @abstractmethod
    def run(self, session: BrowserSession, scanner: AccessibilityScanner) -> Optional[ScanResult]:
        """Drive ``session`` and raise if the verdict is negative."""

        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.node_id!r})"


class ScanCheck(Check):
    """Scan the page with a rule selector and require zero violations."""

    def __init__(self, category: str, name: str, selector: RuleSelector) -> None:
        super().__init__(category, name)
        self.selector = selector

    def validate(self) -> None:
        self.selector.validate()

    def run(self, session: BrowserSession, scanner: AccessibilityScanner) -> ScanResult:
        result = scanner.scan(session, self.selector)
        assert_pass(result, subject=f"{result.url} ({self.selector.describe()})")
        return result


class InteractionCheck(Check):
    """Press keys, then require an element to be visible.

    A selector that never matches is a timeout; a match that stays hidden is
    a failed verdict.
    """

    def __init__(
        self,
        category: str,
        name: str,
        *,
        keys: Sequence[str],
        selector: str,
        timeout_ms: float = 5_000,
    ) -> None:
        super().__init__(category, name)
        self.keys = tuple(keys)
        self.selector = selector
        self.timeout_ms = timeout_ms

    def run(self, session: BrowserSession, scanner: AccessibilityScanner) -> None:
        page = session.page
        try:
            for key in self.keys:
                page.keyboard.down(key)
            element = page.wait_for_selector(self.selector, state="attached", timeout=self.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementWaitTimeoutError(self.selector, self.timeout_ms) from exc
        except PlaywrightError as exc:
            raise SessionError(f"Interaction on {session.target} failed: {exc}") from exc
        if element is None:
            raise ElementWaitTimeoutError(self.selector, self.timeout_ms)

        if not element.is_visible():
            try:
                # focus styles may animate in after the key press
                element.wait_for_element_state("visible", timeout=self.timeout_ms)
            except PlaywrightTimeoutError:
                self.logger.debug("%s stayed hidden for %s ms", self.selector, self.timeout_ms)
            except PlaywrightError as exc:
                raise SessionError(f"Interaction on {session.target} failed: {exc}") from exc
        assert_visible(element, self.selector)
        return None


__all__ = ["Check", "InteractionCheck", "ScanCheck"]
