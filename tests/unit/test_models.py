"""Tests for :mod:`webconformance.models`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tests.fakes import axe_violation
from webconformance.errors import AnalysisError
from webconformance.models import CheckOutcome, CheckStatus, NodeRef, RunReport, ScanResult, Violation
from webconformance.selector import RuleSelector


def test_violation_from_axe_maps_camel_case_fields() -> None:
    """Given an axe violation payload When normalised Then helpUrl and failureSummary land on snake_case fields."""

    violation = Violation.from_axe(axe_violation("document-title", ["html"], tags=["wcag2a"]))

    assert violation.id == "document-title"
    assert violation.impact == "serious"
    assert violation.help_url.endswith("/document-title")
    assert violation.tags == ("wcag2a",)
    assert violation.nodes[0].target == ("html",)
    assert violation.nodes[0].failure_summary == "Fix any of the following"


def test_node_ref_joins_nested_frame_targets() -> None:
    """Given a target inside an iframe When normalised Then the selector chain is joined into one string."""

    node = NodeRef.from_axe({"target": [["iframe#player", "button.play"]], "html": "<button>"})

    assert node.target == ("iframe#player >>> button.play",)


def test_violation_without_id_is_an_engine_fault() -> None:
    """Given a payload without a rule id When normalised Then AnalysisError is raised instead of a bogus finding."""

    with pytest.raises(AnalysisError):
        Violation.from_axe({"description": "anonymous"})


def test_scan_result_passes_only_without_violations() -> None:
    """Given results with and without violations When inspected Then passed and rule_ids reflect the findings."""

    selector = RuleSelector.for_rules("blink")
    clean = ScanResult(url="https://example.edu/", selector=selector)
    dirty = ScanResult(
        url="https://example.edu/",
        selector=selector,
        violations=(Violation.from_axe(axe_violation("blink", ["blink"])),),
    )

    assert clean.passed
    assert not dirty.passed
    assert dirty.rule_ids == ["blink"]


def test_run_report_counts_and_groups_outcomes() -> None:
    """Given mixed outcomes When counting Then each status is tallied and categories keep first-seen order."""

    report = RunReport(
        target="https://example.edu/",
        outcomes=[
            CheckOutcome(category="Moving text", name="a", status=CheckStatus.PASSED),
            CheckOutcome(category="Proper DOM order", name="b", status=CheckStatus.FAILED),
            CheckOutcome(category="Moving text", name="c", status=CheckStatus.ERROR),
        ],
    )

    assert report.counts() == {"passed": 1, "failed": 1, "error": 1}
    assert list(report.by_category()) == ["Moving text", "Proper DOM order"]
    assert not report.passed


def test_run_report_serialises_to_json(tmp_path: Path) -> None:
    """Given a report with a violation When written as JSON Then enums, datetimes and nested models are plain values."""

    violation = Violation.from_axe(axe_violation("list", ["ul#menu"]))
    report = RunReport(
        target="https://example.edu/",
        outcomes=[
            CheckOutcome(
                category="Proper DOM order",
                name="lists",
                status=CheckStatus.FAILED,
                violations=(violation,),
            )
        ],
    )
    path = tmp_path / "nested" / "report.json"

    report.to_json(path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    outcome = payload["outcomes"][0]
    assert outcome["status"] == "failed"
    assert outcome["violations"][0]["nodes"][0]["target"] == ["ul#menu"]
    assert isinstance(payload["started_at"], str)
