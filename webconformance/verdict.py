"""Pass/fail decisions for scan and interaction checks."""

from __future__ import annotations

from typing import Protocol

from .errors import ConformanceViolation, ElementNotVisibleError
from .models import ScanResult


class VisibleElement(Protocol):
    def is_visible(self) -> bool: ...


def assert_pass(result: ScanResult, *, subject: str = "") -> None:
    """Succeed iff ``result`` has no violations, whatever their impact."""

    if result.violations:
        raise ConformanceViolation(result.violations, subject=subject or result.url)


def assert_visible(element: VisibleElement, selector: str) -> None:
    """Succeed iff ``element`` is rendered visibly."""

    if not element.is_visible():
        raise ElementNotVisibleError(selector)


__all__ = ["assert_pass", "assert_visible"]
