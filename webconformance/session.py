"""Isolated browser sessions, one per check."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Sequence

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import NavigationError, NavigationTimeoutError, SessionError
from .tracing import log_event


class Launcher(Protocol):
    """Anything able to start a fresh browser instance."""

    def launch(self) -> Browser: ...

    def stop(self) -> None: ...


class PlaywrightLauncher:
    """Launches Playwright browsers over a lazily started driver.

    The driver connection is shared across sessions; each :meth:`launch`
    still starts its own browser process.
    """

    def __init__(
        self,
        browser_name: str = "chromium",
        *,
        headless: bool = True,
        args: Sequence[str] = (),
    ) -> None:
        self.browser_name = browser_name
        self.headless = headless
        self.args = list(args)
        self._driver: Optional[Playwright] = None

    def launch(self) -> Browser:
        try:
            if self._driver is None:
                self._driver = sync_playwright().start()
            browser_type = getattr(self._driver, self.browser_name)
            return browser_type.launch(headless=self.headless, args=self.args)
        except PlaywrightError as exc:
            raise SessionError(f"Could not launch {self.browser_name}: {exc}") from exc

    def stop(self) -> None:
        if self._driver is not None:
            driver, self._driver = self._driver, None
            driver.stop()


@dataclass(eq=False)
class BrowserSession:
    """A live browser, context and page bound to one navigated document."""

    target: str
    browser: Browser
    context: BrowserContext
    page: Page
    closed: bool = False

    @property
    def url(self) -> str:
        return self.page.url


class SessionProvider:
    """Opens and releases isolated sessions for the scan target.

    Parameters
    ----------
    launcher:
        Browser factory; :class:`PlaywrightLauncher` in production, a fake in
        tests.
    navigation_timeout_ms:
        Budget for ``page.goto``.
    wait_until:
        Navigation readiness state handed to Playwright.
    context_options:
        Extra keyword arguments for ``browser.new_context``. CSP is bypassed
        by default so the engine script can be injected on strict sites.
    """

    def __init__(
        self,
        launcher: Launcher,
        *,
        navigation_timeout_ms: float = 30_000,
        wait_until: str = "load",
        context_options: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.launcher = launcher
        self.navigation_timeout_ms = navigation_timeout_ms
        self.wait_until = wait_until
        self.context_options = {"bypass_csp": True, **(context_options or {})}
        self.logger = logger or logging.getLogger("session")

    def open(self, target: str) -> BrowserSession:
        """Launch a fresh browser and navigate a new page to ``target``."""

        log_event(self.logger, logging.INFO, "session.open", target=target)
        browser = self.launcher.launch()
        try:
            context = browser.new_context(**self.context_options)
            page = context.new_page()
        except PlaywrightError as exc:
            self._release_steps(target, [("browser", browser.close)])
            raise SessionError(f"Could not create a page for {target}: {exc}") from exc

        session = BrowserSession(target=target, browser=browser, context=context, page=page)
        try:
            self._navigate(session)
        except NavigationError:
            self.close(session)
            raise
        return session

    def _navigate(self, session: BrowserSession) -> None:
        try:
            response = session.page.goto(
                session.target,
                timeout=self.navigation_timeout_ms,
                wait_until=self.wait_until,
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeoutError(session.target, self.navigation_timeout_ms) from exc
        except PlaywrightError as exc:
            raise NavigationError(session.target, str(exc).strip().split("\n", 1)[0]) from exc

        status = response.status if response is not None else None
        if status is not None and status >= 400:
            raise NavigationError(session.target, f"HTTP status {status}")
        log_event(
            self.logger,
            logging.INFO,
            "session.navigated",
            target=session.target,
            url=session.url,
            status=status,
        )

    def close(self, session: BrowserSession) -> None:
        """Release every resource of ``session``; repeated calls are no-ops."""

        if session.closed:
            log_event(self.logger, logging.DEBUG, "session.close.skipped", target=session.target)
            return
        session.closed = True
        self._release_steps(
            session.target,
            [
                ("page", session.page.close),
                ("context", session.context.close),
                ("browser", session.browser.close),
            ],
        )
        log_event(self.logger, logging.INFO, "session.close", target=session.target)

    def _release_steps(self, target: str, steps: Sequence[tuple[str, Callable[[], None]]]) -> None:
        # Every step runs; a failed release must not mask the check's own error.
        for resource, release in steps:
            try:
                release()
            except PlaywrightError as exc:
                log_event(
                    self.logger,
                    logging.WARNING,
                    "session.release.error",
                    target=target,
                    resource=resource,
                    error=str(exc),
                )

    @contextmanager
    def session(self, target: str) -> Iterator[BrowserSession]:
        """Open a session for ``target`` and close it on every exit path."""

        opened = self.open(target)
        try:
            yield opened
        finally:
            self.close(opened)

    def shutdown(self) -> None:
        """Stop the launcher's shared driver."""

        self.launcher.stop()


__all__ = ["BrowserSession", "Launcher", "PlaywrightLauncher", "SessionProvider"]
