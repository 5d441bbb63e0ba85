"""Structured logging and timed spans for check execution."""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, Optional

__all__ = ["TraceSpan", "elapsed_ms", "log_event", "safe_json", "trace"]


def safe_json(value: Any) -> Any:
    """Return ``value`` converted into a JSON-serialisable structure."""

    if value is None or isinstance(value, (str, int, bool)):
        return value

    if isinstance(value, float):
        return repr(value) if math.isnan(value) or math.isinf(value) else value

    if isinstance(value, Enum):
        return safe_json(value.value)

    if isinstance(value, datetime):
        return value.isoformat()

    if isinstance(value, (list, tuple)):
        return [safe_json(item) for item in value]

    if isinstance(value, (set, frozenset)):
        return sorted(safe_json(item) for item in value)

    if isinstance(value, dict):
        return {str(key): safe_json(val) for key, val in value.items()}

    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return safe_json(to_dict())

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: safe_json(getattr(value, f.name)) for f in dataclasses.fields(value)}

    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"

    return repr(value)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    exc_info: bool | BaseException | tuple[Any, Any, Any] | None = None,
    **fields: Any,
) -> None:
    """Emit a structured log line whose message is a JSON object."""

    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    payload.update({key: safe_json(value) for key, value in fields.items() if value is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, sort_keys=True), exc_info=exc_info)


def elapsed_ms(start_time: float) -> float:
    """Milliseconds since ``start_time`` (a :func:`time.perf_counter` value)."""

    return round((time.perf_counter() - start_time) * 1000, 2)


@dataclass
class TraceSpan:
    """An open span; ``outcome`` fields are merged into the closing event."""

    name: str
    logger: logging.Logger
    fields: Dict[str, Any]
    start_time: float
    outcome: Dict[str, Any] = field(default_factory=dict)

    def note(self, **fields: Any) -> None:
        log_event(self.logger, logging.DEBUG, "trace.note", trace=self.name, **{**self.fields, **fields})

    def record(self, **fields: Any) -> None:
        self.outcome.update(fields)

    def closing_fields(self) -> Dict[str, Any]:
        return {**self.fields, **self.outcome}

    @property
    def duration_ms(self) -> float:
        return elapsed_ms(self.start_time)


@contextmanager
def trace(name: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[TraceSpan]:
    """Log ``trace.start`` and a closing event with the span duration.

    Assertion failures close the span with a WARNING ``trace.fail`` event,
    since a failed verdict is an expected outcome. Anything else closes it
    with an ERROR ``trace.error`` event. The exception is always re-raised.
    """

    logger = logger or logging.getLogger("trace")
    span = TraceSpan(name=name, logger=logger, fields=dict(fields), start_time=time.perf_counter())
    log_event(logger, logging.INFO, "trace.start", trace=name, **fields)
    try:
        yield span
    except AssertionError as exc:
        log_event(
            logger,
            logging.WARNING,
            "trace.fail",
            trace=name,
            duration_ms=span.duration_ms,
            error=exc.__class__.__name__,
            **span.closing_fields(),
        )
        raise
    except Exception as exc:
        log_event(
            logger,
            logging.ERROR,
            "trace.error",
            exc_info=True,
            trace=name,
            duration_ms=span.duration_ms,
            error=repr(exc),
            **span.closing_fields(),
        )
        raise
    else:
        log_event(
            logger,
            logging.INFO,
            "trace.end",
            trace=name,
            duration_ms=span.duration_ms,
            **span.closing_fields(),
        )
