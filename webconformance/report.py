"""Human readable and machine readable renderings of a run."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .catalog import CATEGORY_NOTES
from .models import CheckOutcome, CheckStatus, RunReport
from .tracing import log_event

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
_LOGGER = logging.getLogger("report")

_STATUS_LABELS = {
    CheckStatus.PASSED: "PASS",
    CheckStatus.FAILED: "FAIL",
    CheckStatus.ERROR: "ERROR",
}


def target_slug(url: str) -> str:
    """Return a filesystem-friendly label for the host of ``url``."""

    parsed = urlparse(url)
    host = (parsed.netloc or parsed.path).strip().lower()
    if host.startswith("www."):
        host = host[4:]
    slug = re.sub(r"[^a-z0-9]+", "-", host).strip("-")
    return slug or "target"


def summary_line(report: RunReport) -> str:
    counts = report.counts()
    verdict = "PASSED" if report.passed else "FAILED"
    return (
        f"{verdict}: {counts['passed']} passed, {counts['failed']} failed, "
        f"{counts['error']} errors"
    )


def _outcome_lines(outcome: CheckOutcome) -> List[str]:
    label = _STATUS_LABELS[outcome.status]
    lines = [f"  {label:<5} {outcome.name} ({outcome.duration_ms:.0f} ms)"]
    if outcome.status is CheckStatus.PASSED:
        return lines
    if outcome.violations:
        for violation in outcome.violations:
            lines.append(f"        - {violation.id} [{violation.impact or 'unknown'}] {violation.description}")
            for node in violation.nodes:
                lines.append(f"          at {' > '.join(node.target)}")
    else:
        lines.append(f"        {outcome.error_kind}: {outcome.message}")
    return lines


def render_text(report: RunReport) -> str:
    """Render ``report`` grouped by category."""

    lines = [f"Accessibility conformance report for {report.target}", summary_line(report)]
    for category, outcomes in report.by_category().items():
        lines.append("")
        note = CATEGORY_NOTES.get(category)
        lines.append(f"{category} ({note})" if note else category)
        for outcome in outcomes:
            lines.extend(_outcome_lines(outcome))
    return "\n".join(lines) + "\n"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_html(report: RunReport) -> str:
    """Render ``report`` through the ``report.html`` template."""

    template = _environment().get_template("report.html")
    return template.render(
        report=report,
        summary=summary_line(report),
        groups=report.by_category(),
        notes=CATEGORY_NOTES,
        labels=_STATUS_LABELS,
    )


def write_reports(report: RunReport, directory: Path) -> Dict[str, Path]:
    """Write JSON and HTML renderings of ``report`` into ``directory``."""

    stamp = report.started_at.strftime("%Y%m%dT%H%M%SZ")
    stem = f"{target_slug(report.target)}-{stamp}"
    directory.mkdir(parents=True, exist_ok=True)

    json_path = directory / f"{stem}.json"
    report.to_json(json_path)
    html_path = directory / f"{stem}.html"
    html_path.write_text(render_html(report), encoding="utf-8")

    paths = {"json": json_path, "html": html_path}
    log_event(_LOGGER, logging.INFO, "report.write", **{kind: str(path) for kind, path in paths.items()})
    return paths


__all__ = ["render_html", "render_text", "summary_line", "target_slug", "write_reports"]
