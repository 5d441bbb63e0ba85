"""Tests for :mod:`webconformance.session`."""

from __future__ import annotations

import logging

import pytest

from tests.fakes import FakeLauncher, FakePage, PlaywrightError, PlaywrightTimeoutError
from webconformance.errors import NavigationError, NavigationTimeoutError, SessionError
from webconformance.session import PlaywrightLauncher, SessionProvider


def _provider(page: FakePage, **kwargs) -> tuple[SessionProvider, FakeLauncher]:
    launcher = FakeLauncher(lambda: page, **kwargs)
    return SessionProvider(launcher, navigation_timeout_ms=1_500, wait_until="domcontentloaded"), launcher


def test_open_navigates_fresh_page_with_csp_bypass(target: str) -> None:
    """Given a reachable target When a session opens Then the page is navigated with the configured budget and CSP is bypassed."""

    page = FakePage(final_url="https://example.edu/home")
    provider, launcher = _provider(page)

    session = provider.open(target)

    assert session.url == "https://example.edu/home"
    assert page.goto_calls == [{"url": target, "timeout": 1_500, "wait_until": "domcontentloaded"}]
    assert launcher.browsers[0].context_options == {"bypass_csp": True}
    provider.close(session)


def test_sessions_do_not_share_browsers(provider: SessionProvider, launcher: FakeLauncher, target: str) -> None:
    """Given two sessions When both are opened Then each gets its own browser, context and page."""

    first = provider.open(target)
    second = provider.open(target)

    assert first.browser is not second.browser
    assert first.page is not second.page
    assert len(launcher.browsers) == 2


def test_close_releases_everything_once(target: str) -> None:
    """Given an open session When close is called twice Then page, context and browser are each closed exactly once."""

    page = FakePage()
    provider, launcher = _provider(page)
    session = provider.open(target)

    provider.close(session)
    provider.close(session)

    browser = launcher.browsers[0]
    assert (page.closed, browser.context.closed, browser.closed) == (1, 1, 1)
    assert session.closed


def test_close_keeps_going_when_a_release_fails(target: str, caplog: pytest.LogCaptureFixture) -> None:
    """Given a page whose close fails When the session closes Then context and browser are still released and the failure is logged."""

    page = FakePage(close_error=PlaywrightError("Target page, context or browser has been closed"))
    provider, launcher = _provider(page)
    session = provider.open(target)

    with caplog.at_level(logging.WARNING, logger="session"):
        provider.close(session)

    browser = launcher.browsers[0]
    assert browser.context.closed == 1 and browser.closed == 1
    assert "session.release.error" in caplog.text


def test_navigation_timeout_is_typed_and_releases_session(target: str) -> None:
    """Given a goto that times out When opening Then NavigationTimeoutError is raised and the browser is closed."""

    page = FakePage(goto_error=PlaywrightTimeoutError("Timeout 1500ms exceeded."))
    provider, launcher = _provider(page)

    with pytest.raises(NavigationTimeoutError) as excinfo:
        provider.open(target)

    assert excinfo.value.timeout_ms == 1_500
    assert launcher.browsers[0].closed == 1
    assert page.closed == 1


def test_unreachable_target_raises_navigation_error(target: str) -> None:
    """Given a DNS failure When opening Then NavigationError carries the first line of the browser message."""

    page = FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://example.edu/\nCall log:\n..."))
    provider, launcher = _provider(page)

    with pytest.raises(NavigationError) as excinfo:
        provider.open(target)

    assert excinfo.value.reason == "net::ERR_NAME_NOT_RESOLVED at https://example.edu/"
    assert not isinstance(excinfo.value, NavigationTimeoutError)
    assert launcher.browsers[0].closed == 1


def test_http_error_status_is_a_navigation_error(target: str) -> None:
    """Given a 503 response When opening Then the error page is not scanned."""

    provider, launcher = _provider(FakePage(status=503))

    with pytest.raises(NavigationError, match="HTTP status 503"):
        provider.open(target)

    assert launcher.browsers[0].closed == 1


def test_page_creation_failure_closes_browser(target: str) -> None:
    """Given a context that cannot create a page When opening Then SessionError is raised and the browser is released."""

    provider, launcher = _provider(FakePage(), page_error=PlaywrightError("Browser has been closed"))

    with pytest.raises(SessionError, match="Could not create a page"):
        provider.open(target)

    assert launcher.browsers[0].closed == 1


def test_session_context_manager_closes_on_error(provider: SessionProvider, launcher: FakeLauncher, target: str) -> None:
    """Given a failure inside the session block When the block exits Then the session is still released."""

    with pytest.raises(RuntimeError):
        with provider.session(target):
            raise RuntimeError("boom")

    assert launcher.browsers[0].closed == 1


def test_shutdown_stops_launcher(provider: SessionProvider, launcher: FakeLauncher) -> None:
    """Given a provider When shut down Then the launcher's driver is stopped."""

    provider.shutdown()

    assert launcher.stopped == 1


def test_driver_start_failure_is_a_session_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given a Playwright driver that cannot start When a browser is launched Then SessionError is raised."""

    class BrokenDriver:
        def start(self) -> None:
            raise PlaywrightError("It looks like you are using Playwright Sync API inside the asyncio loop")

    monkeypatch.setattr("webconformance.session.sync_playwright", lambda: BrokenDriver())

    with pytest.raises(SessionError, match="Could not launch chromium"):
        PlaywrightLauncher().launch()
