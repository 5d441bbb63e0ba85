"""Logging utilities for the conformance harness."""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional, Union


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG.
_NOISY_LOGGERS = ("urllib3", "asyncio")


def resolve_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Translate ``"debug"``/``"INFO"``/``10`` style values into a logging level."""

    if isinstance(level, int):
        return level
    if not level:
        return default
    candidate = logging.getLevelName(str(level).strip().upper())
    return candidate if isinstance(candidate, int) else default


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[logging.Handler] = None,
    *,
    quiet: Iterable[str] = _NOISY_LOGGERS,
) -> None:
    """Configure the root logger for a harness run.

    Parameters
    ----------
    level:
        Logging level, either numeric or a level name.
    stream:
        Optional handler. When omitted a handler writing to ``sys.stderr`` is
        used so that ``--list`` and report output on stdout stay clean.
    quiet:
        Logger names capped at WARNING regardless of ``level``.
    """

    root_logger = logging.getLogger()
    handler: logging.Handler = stream if stream is not None else logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    # configure_logging runs once per CLI invocation but many times in tests
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    root_logger.setLevel(resolve_level(level))
    root_logger.addHandler(handler)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging", "resolve_level"]
