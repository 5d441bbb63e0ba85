"""HTTP helper used to fetch the accessibility engine build."""

from __future__ import annotations

import logging

import requests

from .tracing import log_event

_USER_AGENT = "webconformance/0.1 (+accessibility conformance harness)"


def fetch_text(url: str, timeout: float = 20) -> str:
    """GET ``url`` and return the body; non-2xx statuses raise ``requests.HTTPError``."""

    logger = logging.getLogger("http")
    log_event(logger, logging.DEBUG, "http.request", method="GET", url=url, timeout=timeout)
    response = requests.get(url, timeout=timeout, headers={"User-Agent": _USER_AGENT})
    elapsed = getattr(response, "elapsed", None)
    log_event(
        logger,
        logging.INFO,
        "http.response",
        method="GET",
        url=str(response.url),
        status_code=response.status_code,
        elapsed_ms=round(elapsed.total_seconds() * 1000, 2) if elapsed else None,
        bytes=len(response.content or b""),
    )
    response.raise_for_status()
    return response.text


__all__ = ["fetch_text"]
