"""Configuration for a conformance run."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

_LOGGER = logging.getLogger(__name__)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "configs" / "harness.json"
_ENV_PREFIX = "WEBCONFORMANCE_"

DEFAULT_TARGET_URL = "https://yalecollege.yale.edu/"
DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"

_BROWSERS = {"chromium", "firefox", "webkit"}
_WAIT_STATES = {"load", "domcontentloaded", "networkidle", "commit"}


class HarnessConfig(BaseModel):
    """Settings shared by the CLI runner and the live pytest suite."""

    target_url: str = Field(default=DEFAULT_TARGET_URL, description="Absolute URL of the page under test")
    browser: str = Field(default="chromium", description="Playwright browser type")
    headless: bool = Field(default=True, description="Run the browser without a window")
    wait_until: str = Field(default="load", description="Navigation readiness state")
    navigation_timeout_ms: float = Field(default=30_000, description="Budget for loading the target")
    analysis_timeout_ms: float = Field(default=60_000, description="Budget for one engine run")
    element_timeout_ms: float = Field(default=5_000, description="Budget for interaction waits")
    axe_script_path: Optional[Path] = Field(default=None, description="Local axe-core build to inject")
    axe_script_url: str = Field(default=DEFAULT_AXE_SCRIPT_URL, description="Where to fetch axe-core from")
    axe_cache_dir: Path = Field(default=Path(".cache") / "webconformance")
    report_dir: Path = Field(default=Path("reports"))
    catalog_path: Optional[Path] = Field(default=None, description="YAML file with extra scan checks")
    log_level: str = Field(default="INFO", description="Desired logging verbosity")

    @field_validator("target_url", mode="before")
    @classmethod
    def _ensure_target(cls, value: Any) -> str:
        text = str(value or "").strip()
        parsed = urlparse(text)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"target_url must be an absolute http(s) URL, got '{text}'")
        return text

    @field_validator("browser", mode="before")
    @classmethod
    def _normalise_browser(cls, value: Any) -> str:
        candidate = str(value or "chromium").strip().lower()
        if candidate not in _BROWSERS:
            raise ValueError(
                f"Unsupported browser '{value}'. Expected one of: {', '.join(sorted(_BROWSERS))}."
            )
        return candidate

    @field_validator("wait_until", mode="before")
    @classmethod
    def _normalise_wait_until(cls, value: Any) -> str:
        candidate = str(value or "load").strip().lower()
        if candidate not in _WAIT_STATES:
            raise ValueError(
                f"Unsupported wait_until '{value}'. Expected one of: {', '.join(sorted(_WAIT_STATES))}."
            )
        return candidate

    @field_validator("navigation_timeout_ms", "analysis_timeout_ms", "element_timeout_ms")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be positive")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    @classmethod
    def load(cls, path: Path | None = None, **overrides: Any) -> "HarnessConfig":
        """Merge defaults, the JSON config file, environment and ``overrides``.

        ``None`` values in ``overrides`` are ignored so CLI flags that were
        not given do not mask file or environment settings.
        """

        config_path = path or _DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}

        if config_path.exists():
            try:
                data = json.loads(config_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                _LOGGER.warning("Unable to decode harness config at %s: %s", config_path, exc)

        for name in cls.model_fields:
            env_value = os.environ.get(f"{_ENV_PREFIX}{name.upper()}")
            if env_value is not None:
                data[name] = env_value

        data.update({key: value for key, value in overrides.items() if value is not None})
        known = {key: value for key, value in data.items() if key in cls.model_fields}
        return cls(**known)


def load_harness_config(path: Path | None = None) -> HarnessConfig:
    """Helper to load the harness configuration."""

    return HarnessConfig.load(path)


__all__ = ["DEFAULT_AXE_SCRIPT_URL", "DEFAULT_TARGET_URL", "HarnessConfig", "load_harness_config"]
