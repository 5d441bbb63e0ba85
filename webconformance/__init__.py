"""Browser-driven accessibility conformance checks for a web page."""

from .catalog import CheckCatalog, default_catalog, load_catalog_file
from .checks import Check, InteractionCheck, ScanCheck
from .config import HarnessConfig, load_harness_config
from .errors import (
    AnalysisError,
    AnalysisTimeoutError,
    CatalogError,
    CheckTimeoutError,
    ConformanceViolation,
    ElementNotVisibleError,
    ElementWaitTimeoutError,
    HarnessError,
    InvalidSelectorError,
    NavigationError,
    NavigationTimeoutError,
    SessionError,
)
from .logging_config import configure_logging
from .models import CheckOutcome, CheckStatus, NodeRef, RunReport, ScanResult, Violation
from .runner import CheckRunner, build_catalog, build_runner
from .scanner import AccessibilityScanner
from .selector import RuleSelector
from .session import BrowserSession, PlaywrightLauncher, SessionProvider
from .verdict import assert_pass, assert_visible

__version__ = "0.1.0"

__all__ = [
    "AccessibilityScanner",
    "AnalysisError",
    "AnalysisTimeoutError",
    "BrowserSession",
    "CatalogError",
    "Check",
    "CheckCatalog",
    "CheckOutcome",
    "CheckRunner",
    "CheckStatus",
    "CheckTimeoutError",
    "ConformanceViolation",
    "ElementNotVisibleError",
    "ElementWaitTimeoutError",
    "HarnessConfig",
    "HarnessError",
    "InteractionCheck",
    "InvalidSelectorError",
    "NavigationError",
    "NavigationTimeoutError",
    "NodeRef",
    "PlaywrightLauncher",
    "RuleSelector",
    "RunReport",
    "ScanCheck",
    "ScanResult",
    "SessionError",
    "SessionProvider",
    "Violation",
    "assert_pass",
    "assert_visible",
    "build_catalog",
    "build_runner",
    "configure_logging",
    "default_catalog",
    "load_catalog_file",
    "load_harness_config",
]
