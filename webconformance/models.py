"""Data models shared by the scanner, the verdict and the reporters."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import AnalysisError
from .selector import RuleSelector


class Serializable:
    """Mixin providing JSON serialisation helpers for dataclasses."""

    __slots__ = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the dataclass to a serialisable dictionary."""

        def _convert(value: Any) -> Any:
            if dataclasses.is_dataclass(value) and not isinstance(value, type):
                return {f.name: _convert(getattr(value, f.name)) for f in dataclasses.fields(value)}
            if isinstance(value, datetime):
                return value.isoformat()
            if isinstance(value, Enum):
                return value.value
            if isinstance(value, (list, tuple)):
                return [_convert(item) for item in value]
            if isinstance(value, dict):
                return {key: _convert(val) for key, val in value.items()}
            return value

        return _convert(self)

    def to_json(self, path: Path) -> None:
        """Write the dataclass as JSON to the provided ``path``."""

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")


@dataclass(frozen=True, slots=True)
class NodeRef(Serializable):
    """A DOM node implicated in a violation."""

    target: Tuple[str, ...]
    html: str = ""
    failure_summary: str = ""

    @classmethod
    def from_axe(cls, payload: Mapping[str, Any]) -> "NodeRef":
        raw_target = payload.get("target") or ()
        # iframe and shadow DOM targets nest lists of selectors
        target = tuple(
            " >>> ".join(str(part) for part in item) if isinstance(item, list) else str(item)
            for item in raw_target
        )
        return cls(
            target=target,
            html=str(payload.get("html") or ""),
            failure_summary=str(payload.get("failureSummary") or ""),
        )


@dataclass(frozen=True, slots=True)
class Violation(Serializable):
    """A failing rule together with every node it failed on."""

    id: str
    description: str
    impact: Optional[str] = None
    help: str = ""
    help_url: str = ""
    tags: Tuple[str, ...] = ()
    nodes: Tuple[NodeRef, ...] = ()

    @classmethod
    def from_axe(cls, payload: Mapping[str, Any]) -> "Violation":
        rule_id = payload.get("id")
        if not isinstance(rule_id, str) or not rule_id:
            raise AnalysisError(f"Engine returned a violation without a rule id: {payload!r}")
        nodes = payload.get("nodes") or []
        return cls(
            id=rule_id,
            description=str(payload.get("description") or ""),
            impact=payload.get("impact"),
            help=str(payload.get("help") or ""),
            help_url=str(payload.get("helpUrl") or ""),
            tags=tuple(str(tag) for tag in payload.get("tags") or ()),
            nodes=tuple(NodeRef.from_axe(node) for node in nodes),
        )


@dataclass(frozen=True, slots=True)
class ScanResult(Serializable):
    """Outcome of one analysis call, in engine order."""

    url: str
    selector: RuleSelector
    violations: Tuple[Violation, ...] = ()
    engine_version: Optional[str] = None
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def rule_ids(self) -> list[str]:
        return [violation.id for violation in self.violations]


class CheckStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CheckOutcome(Serializable):
    """What happened when one check ran.

    ``failed`` means the page was judged non-conformant; ``error`` means no
    verdict could be reached. ``error_kind`` holds the exception class name.
    """

    category: str
    name: str
    status: CheckStatus
    duration_ms: float = 0.0
    error_kind: Optional[str] = None
    message: str = ""
    violations: Tuple[Violation, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASSED

    @property
    def node_id(self) -> str:
        return f"{self.category}::{self.name}"


@dataclass(slots=True)
class RunReport(Serializable):
    """All outcomes of one run against one target, in execution order."""

    target: str
    outcomes: List[CheckOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def passed(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    def counts(self) -> Dict[str, int]:
        totals = {status.value: 0 for status in CheckStatus}
        for outcome in self.outcomes:
            totals[outcome.status.value] += 1
        return totals

    def by_category(self) -> Dict[str, List[CheckOutcome]]:
        grouped: Dict[str, List[CheckOutcome]] = {}
        for outcome in self.outcomes:
            grouped.setdefault(outcome.category, []).append(outcome)
        return grouped


__all__ = [
    "CheckOutcome",
    "CheckStatus",
    "NodeRef",
    "RunReport",
    "ScanResult",
    "Serializable",
    "Violation",
]
