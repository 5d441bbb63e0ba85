"""Exception hierarchy for the conformance harness.

Two families exist. :class:`HarnessError` subclasses are system faults: the
harness could not produce a verdict (browser unreachable, engine crash,
catalog authoring defect, timeout). :class:`ConformanceViolation` and
:class:`ElementNotVisibleError` are verdicts: the page was checked and found
wanting. The latter derive from :class:`AssertionError` so pytest reports
them as failures rather than errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .models import Violation


class HarnessError(Exception):
    """Base class for every non-verdict failure raised by the harness."""


class SessionError(HarnessError):
    """The browser session could not be established or driven."""


class NavigationError(SessionError):
    """The scan target could not be loaded."""

    def __init__(self, url: str, reason: str) -> None:
        HarnessError.__init__(self, f"Navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class InvalidSelectorError(HarnessError):
    """A rule selector is malformed or selects nothing."""


class CatalogError(HarnessError):
    """A catalog definition is malformed or contains duplicate checks."""


class AnalysisError(HarnessError):
    """The accessibility engine failed to complete an analysis."""


class CheckTimeoutError(HarnessError):
    """A bounded wait exceeded its budget."""

    def __init__(self, operation: str, timeout_ms: float, detail: str = "") -> None:
        message = f"{operation} exceeded {timeout_ms:g} ms"
        if detail:
            message = f"{message}: {detail}"
        HarnessError.__init__(self, message)
        self.operation = operation
        self.timeout_ms = timeout_ms


class NavigationTimeoutError(NavigationError, CheckTimeoutError):
    """Navigation to the scan target did not finish in time."""

    def __init__(self, url: str, timeout_ms: float) -> None:
        NavigationError.__init__(self, url, f"timed out after {timeout_ms:g} ms")
        self.operation = "navigation"
        self.timeout_ms = timeout_ms


class AnalysisTimeoutError(AnalysisError, CheckTimeoutError):
    """The engine did not return a result in time."""

    def __init__(self, timeout_ms: float) -> None:
        AnalysisError.__init__(self, f"analysis exceeded {timeout_ms:g} ms")
        self.operation = "analysis"
        self.timeout_ms = timeout_ms


class ElementWaitTimeoutError(CheckTimeoutError):
    """An element never appeared on the page."""

    def __init__(self, selector: str, timeout_ms: float) -> None:
        CheckTimeoutError.__init__(self, "element wait", timeout_ms, f"selector {selector!r} never matched")
        self.selector = selector


def _format_violation(violation: "Violation") -> str:
    lines = [f"- {violation.id} [{violation.impact or 'unknown'}] {violation.description}"]
    if violation.help_url:
        lines.append(f"  see {violation.help_url}")
    for node in violation.nodes:
        lines.append(f"  at {' > '.join(node.target) or '<unknown node>'}")
    return "\n".join(lines)


class ConformanceViolation(AssertionError):
    """The engine reported one or more violations for a selection."""

    def __init__(self, violations: Sequence["Violation"], *, subject: str = "") -> None:
        self.violations = tuple(violations)
        self.subject = subject
        super().__init__(self._render())

    @property
    def rule_ids(self) -> list[str]:
        return [violation.id for violation in self.violations]

    def _render(self) -> str:
        count = len(self.violations)
        noun = "violation" if count == 1 else "violations"
        header = f"{count} accessibility {noun}"
        if self.subject:
            header = f"{header} on {self.subject}"
        body: Iterable[str] = (_format_violation(violation) for violation in self.violations)
        return "\n".join([f"{header}:", *body])


class ElementNotVisibleError(AssertionError):
    """An element expected to be visible after an interaction is hidden."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Element matching {selector!r} is not visible")
        self.selector = selector


__all__ = [
    "AnalysisError",
    "AnalysisTimeoutError",
    "CatalogError",
    "CheckTimeoutError",
    "ConformanceViolation",
    "ElementNotVisibleError",
    "ElementWaitTimeoutError",
    "HarnessError",
    "InvalidSelectorError",
    "NavigationError",
    "NavigationTimeoutError",
    "SessionError",
]
