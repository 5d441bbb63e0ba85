"""Shared pytest fixtures for the webconformance test-suite."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import sys

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from tests.fakes import TARGET, FakeElement, FakeEngine, FakeLauncher, FakePage
from webconformance.catalog import SKIP_LINK_SELECTOR
from webconformance.runner import CheckRunner
from webconformance.scanner import AccessibilityScanner
from webconformance.selector import RuleSelector
from webconformance.session import BrowserSession, SessionProvider


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run the live conformance suite against the configured target.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip ``live`` tests unless ``--live`` was given."""

    if config.getoption("--live"):
        return
    skip_live = pytest.mark.skip(reason="needs a browser and network; pass --live to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def target() -> str:
    """Return the URL every fake session navigates to."""

    return TARGET


@pytest.fixture
def conformant_page() -> FakePage:
    """Return a page whose skip link shows up on the first Tab."""

    return FakePage(elements={SKIP_LINK_SELECTOR: FakeElement(visible=True)})


@pytest.fixture
def launcher() -> FakeLauncher:
    """Return a launcher producing pages with a visible skip link."""

    return FakeLauncher(lambda: FakePage(elements={SKIP_LINK_SELECTOR: FakeElement(visible=True)}))


@pytest.fixture
def provider(launcher: FakeLauncher) -> SessionProvider:
    """Return a session provider backed by the fake launcher."""

    return SessionProvider(launcher, navigation_timeout_ms=1_000)


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Return an engine that finds nothing on any page."""

    return FakeEngine()


@pytest.fixture
def scanner(fake_engine: FakeEngine) -> AccessibilityScanner:
    """Return a scanner wired to the fake engine."""

    return AccessibilityScanner(fake_engine, timeout_ms=2_000)


@pytest.fixture
def runner(provider: SessionProvider, scanner: AccessibilityScanner) -> CheckRunner:
    """Return a runner over the fake provider and scanner."""

    return CheckRunner(provider, scanner)


@pytest.fixture
def session(provider: SessionProvider, target: str) -> Iterator[BrowserSession]:
    """Yield an open session on the fake target and close it afterwards."""

    with provider.session(target) as opened:
        yield opened


@pytest.fixture
def title_selector() -> RuleSelector:
    """Return a rule-mode selector for ``document-title``."""

    return RuleSelector.for_rules("document-title")
