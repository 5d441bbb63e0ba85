"""Adapter around the axe-core accessibility engine running inside the page."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from .config import DEFAULT_AXE_SCRIPT_URL
from .errors import AnalysisError, AnalysisTimeoutError
from .http import fetch_text
from .tracing import log_event

_TIMEOUT_MARKER = "webconformance:analysis-timeout"

_PRESENT_JS = "() => typeof window.axe === 'object' && typeof window.axe.run === 'function'"

_RULES_JS = "() => axe.getRules().map((rule) => ({ id: rule.ruleId, tags: rule.tags }))"

_ANALYZE_JS = """
async ([options, timeoutMs]) => {
  let timer;
  const expired = new Promise((_, reject) => {
    timer = setTimeout(() => reject(new Error('%s')), timeoutMs);
  });
  try {
    const results = await Promise.race([axe.run(document, options), expired]);
    return { version: axe.version, url: results.url, violations: results.violations };
  } finally {
    clearTimeout(timer);
  }
}
""" % _TIMEOUT_MARKER


class AxeSource:
    """Provides the axe-core script, from disk or a cached download."""

    def __init__(
        self,
        *,
        script_path: Optional[Path] = None,
        script_url: str = DEFAULT_AXE_SCRIPT_URL,
        cache_dir: Path = Path(".cache") / "webconformance",
        fetch: Callable[[str], str] = fetch_text,
    ) -> None:
        self.script_path = script_path
        self.script_url = script_url
        self.cache_dir = cache_dir
        self._fetch = fetch
        self._script: Optional[str] = None
        self._logger = logging.getLogger("engine")

    @property
    def cache_file(self) -> Path:
        digest = hashlib.sha256(self.script_url.encode("utf-8")).hexdigest()[:16]
        return self.cache_dir / f"axe-{digest}.js"

    def load(self) -> str:
        if self._script is None:
            self._script = self._read()
        return self._script

    def _read(self) -> str:
        if self.script_path is not None:
            try:
                return self.script_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise AnalysisError(f"Cannot read axe-core from {self.script_path}: {exc}") from exc

        cache_file = self.cache_file
        if cache_file.exists():
            return cache_file.read_text(encoding="utf-8")

        try:
            script = self._fetch(self.script_url)
        except requests.RequestException as exc:
            raise AnalysisError(f"Cannot download axe-core from {self.script_url}: {exc}") from exc
        if not script.strip():
            raise AnalysisError(f"Downloaded axe-core from {self.script_url} is empty")

        cache_file.parent.mkdir(parents=True, exist_ok=True)
        cache_file.write_text(script, encoding="utf-8")
        log_event(
            self._logger,
            logging.INFO,
            "axe.download",
            url=self.script_url,
            path=str(cache_file),
            bytes=len(script),
        )
        return script


class AxeEngine:
    """Drives axe-core through Playwright's ``evaluate`` bridge.

    Every method raises :class:`AnalysisError` when the page-side call
    fails; engine faults are never reported as findings.
    """

    def __init__(self, source: AxeSource) -> None:
        self.source = source
        self._logger = logging.getLogger("engine")

    def ensure_loaded(self, page: Page) -> None:
        """Inject axe-core into ``page`` unless it is already present."""

        try:
            if page.evaluate(_PRESENT_JS):
                return
            page.add_script_tag(content=self.source.load())
            loaded = page.evaluate(_PRESENT_JS)
        except PlaywrightError as exc:
            raise AnalysisError(f"Injecting axe-core failed: {exc}") from exc
        if not loaded:
            raise AnalysisError("axe-core was injected but window.axe is not available")
        log_event(self._logger, logging.DEBUG, "engine.inject", url=page.url)

    def rules(self, page: Page) -> Dict[str, Tuple[str, ...]]:
        """Return the engine's rule catalog as ``rule id -> tags``, in engine order."""

        self.ensure_loaded(page)
        try:
            raw = page.evaluate(_RULES_JS)
        except PlaywrightError as exc:
            raise AnalysisError(f"Listing axe-core rules failed: {exc}") from exc
        catalog = {str(item["id"]): tuple(item.get("tags") or ()) for item in raw or []}
        log_event(self._logger, logging.DEBUG, "engine.rules", count=len(catalog))
        return catalog

    def analyze(self, page: Page, options: Mapping[str, Any], timeout_ms: float) -> Dict[str, Any]:
        """Run ``axe.run`` with ``options`` and return the raw result payload."""

        self.ensure_loaded(page)
        try:
            payload = page.evaluate(_ANALYZE_JS, [dict(options), timeout_ms])
        except PlaywrightError as exc:
            if _TIMEOUT_MARKER in str(exc):
                raise AnalysisTimeoutError(timeout_ms) from exc
            raise AnalysisError(f"axe-core run failed: {exc}") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("violations"), list):
            raise AnalysisError(f"axe-core returned an unexpected payload: {payload!r:.200}")
        return payload


__all__ = ["AxeEngine", "AxeSource"]
