"""Tests for :mod:`webconformance.report`."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tests.fakes import axe_violation
from webconformance.catalog import STANDARDS
from webconformance.models import CheckOutcome, CheckStatus, RunReport, Violation
from webconformance.report import render_html, render_text, summary_line, target_slug, write_reports


@pytest.fixture
def mixed_report() -> RunReport:
    """Return a report with one outcome of each status."""

    return RunReport(
        target="https://www.Example.edu/admissions",
        started_at=datetime(2026, 10, 19, 8, 30, 0, tzinfo=timezone.utc),
        outcomes=[
            CheckOutcome(category="Moving text", name="no blinking elements", status=CheckStatus.PASSED, duration_ms=812.4),
            CheckOutcome(
                category="Proper DOM order",
                name="list items are nested within lists",
                status=CheckStatus.FAILED,
                error_kind="ConformanceViolation",
                violations=(Violation.from_axe(axe_violation("listitem", ["li.orphan"])),),
            ),
            CheckOutcome(
                category=STANDARDS,
                name="automated WCAG 2.0 A rules",
                status=CheckStatus.ERROR,
                error_kind="AnalysisTimeoutError",
                message="analysis exceeded 60000 ms",
            ),
        ],
    )


@pytest.mark.parametrize(
    "url, slug",
    [
        ("https://www.Example.edu/admissions", "example-edu"),
        ("http://localhost:8000/", "localhost-8000"),
        ("", "target"),
    ],
)
def test_target_slug(url: str, slug: str) -> None:
    """Given a target URL When slugged Then the host becomes a filesystem friendly label."""

    assert target_slug(url) == slug


def test_summary_line_counts_statuses(mixed_report: RunReport) -> None:
    """Given a mixed report When summarised Then the run fails and every status is counted."""

    assert summary_line(mixed_report) == "FAILED: 1 passed, 1 failed, 1 errors"


def test_render_text_groups_by_category_with_notes(mixed_report: RunReport) -> None:
    """Given a mixed report When rendered as text Then categories, labels, nodes and the sweep note appear."""

    text = render_text(mixed_report)

    assert "  PASS  no blinking elements (812 ms)" in text
    assert "  FAIL  list items are nested within lists" in text
    assert "- listitem [serious]" in text
    assert "at li.orphan" in text
    assert "AnalysisTimeoutError: analysis exceeded 60000 ms" in text
    assert f"{STANDARDS} (Failure might indicate that a feature needs manual review.)" in text


def test_render_html_escapes_and_lists_outcomes(mixed_report: RunReport) -> None:
    """Given a mixed report When rendered as HTML Then each outcome is listed with its status class."""

    html = render_html(mixed_report)

    assert "<h2>Proper DOM order</h2>" in html
    assert 'class="failed"' in html
    assert "<code>listitem</code>" in html
    assert "needs manual review" in html


def test_write_reports_creates_json_and_html(mixed_report: RunReport, tmp_path: Path) -> None:
    """Given a report When written Then timestamped JSON and HTML files land in the directory."""

    paths = write_reports(mixed_report, tmp_path / "reports")

    assert paths["json"].name == "example-edu-20261019T083000Z.json"
    assert paths["html"].name == "example-edu-20261019T083000Z.html"
    payload = json.loads(paths["json"].read_text(encoding="utf-8"))
    assert [outcome["status"] for outcome in payload["outcomes"]] == ["passed", "failed", "error"]
