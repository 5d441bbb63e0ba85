"""The static registry of checks run against a scan target."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import yaml

from .checks import Check, InteractionCheck, ScanCheck
from .errors import CatalogError
from .selector import RuleSelector
from .tracing import log_event

FOCUS = "Focus elements"
ATTRIBUTES = "Valid and correct attributes"
MOVING_TEXT = "Moving text"
DOM_ORDER = "Proper DOM order"
STANDARDS = "Standards sweeps"

CATEGORY_NOTES: Dict[str, str] = {
    STANDARDS: "Failure might indicate that a feature needs manual review.",
}

SKIP_LINK_SELECTOR = "text=skip to main content"

_ATTRIBUTE_RULES: Tuple[Tuple[str, str], ...] = (
    ("no aria-hidden='true' on the document body", "aria-hidden-body"),
    ("required ARIA attributes are present", "aria-required-attr"),
    ("ARIA attributes are valid aria-* names", "aria-valid-attr"),
    ("document has a title", "document-title"),
    ("no duplicated active ids", "duplicate-id-active"),
    ("no duplicated ids", "duplicate-id"),
    ("html element has a lang attribute", "html-has-lang"),
    ("html lang attribute is valid", "html-lang-valid"),
)

_MOVING_TEXT_RULES: Tuple[Tuple[str, str], ...] = (
    ("no blinking elements", "blink"),
    ("no marquee elements", "marquee"),
)

_DOM_ORDER_RULES: Tuple[Tuple[str, str], ...] = (
    ("ordered and unordered lists are well structured", "list"),
    ("list items are nested within lists", "listitem"),
    ("definition lists are well structured", "definition-list"),
    ("dt and dd are nested inside dl", "dlitem"),
)

_STANDARD_SWEEPS: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = (
    ("automated WCAG 2.0 A rules", ("wcag2a",), ()),
    ("automated WCAG 2.0 AA rules", ("wcag2aa",), ()),
    ("automated WCAG 2.1 A rules", ("wcag21a",), ()),
    ("automated WCAG 2.1 AA rules", ("wcag21aa",), ()),
    # the skip link has its own interaction check under FOCUS
    ("automated best-practice rules", ("best-practice",), ("skip-link",)),
)


class CheckCatalog:
    """An ordered, immutable collection of checks for one scan target.

    Grouping is a reporting concern: every check carries its own category and
    the catalog only offers views over the flat list. Checks are validated on
    construction so selector authoring mistakes surface before any browser is
    launched.
    """

    def __init__(self, target: str, checks: Iterable[Check] = ()) -> None:
        self.target = target
        self._checks: Tuple[Check, ...] = tuple(checks)
        seen: Dict[str, Check] = {}
        for check in self._checks:
            if check.node_id in seen:
                raise CatalogError(f"Duplicate check {check.node_id!r}")
            seen[check.node_id] = check
            check.validate()
        self._index = seen

    @property
    def checks(self) -> Tuple[Check, ...]:
        return self._checks

    def __iter__(self) -> Iterator[Check]:
        return iter(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    def get(self, node_id: str) -> Check:
        try:
            return self._index[node_id]
        except KeyError:
            raise CatalogError(f"Unknown check {node_id!r}") from None

    def categories(self) -> List[str]:
        return list(dict.fromkeys(check.category for check in self._checks))

    def by_category(self) -> Dict[str, List[Check]]:
        grouped: Dict[str, List[Check]] = {}
        for check in self._checks:
            grouped.setdefault(check.category, []).append(check)
        return grouped

    def select(
        self,
        *,
        categories: Optional[Sequence[str]] = None,
        names: Optional[Sequence[str]] = None,
    ) -> "CheckCatalog":
        """Return the sub-catalog of checks matching both filters.

        A check is kept when its category is among ``categories`` and its
        name is among ``names``; an omitted filter matches everything.

        Matching is case-insensitive. A name matches either a check name or
        its ``category::name`` id. Unknown filters raise :class:`CatalogError`
        so a typo never silently selects nothing.
        """

        chosen = list(self._checks)
        if categories:
            wanted = {value.strip().lower() for value in categories}
            known = {category.lower() for category in self.categories()}
            missing = sorted(wanted - known)
            if missing:
                raise CatalogError(f"Unknown categories: {', '.join(missing)}")
            chosen = [check for check in chosen if check.category.lower() in wanted]
        if names:
            wanted_names = {value.strip().lower() for value in names}
            matched = {
                key
                for check in chosen
                for key in (check.name.lower(), check.node_id.lower())
                if key in wanted_names
            }
            missing = sorted(wanted_names - matched)
            if missing:
                raise CatalogError(f"No check matches: {', '.join(missing)}")
            chosen = [
                check
                for check in chosen
                if check.name.lower() in wanted_names or check.node_id.lower() in wanted_names
            ]
        return CheckCatalog(self.target, chosen)

    def extend(self, checks: Iterable[Check]) -> "CheckCatalog":
        return CheckCatalog(self.target, [*self._checks, *checks])


def default_catalog(target: str, *, element_timeout_ms: float = 5_000) -> CheckCatalog:
    """Build the built-in catalog for ``target``."""

    checks: List[Check] = [
        InteractionCheck(
            FOCUS,
            "skip to main content link appears on first Tab",
            keys=("Tab",),
            selector=SKIP_LINK_SELECTOR,
            timeout_ms=element_timeout_ms,
        )
    ]
    for category, rules in (
        (ATTRIBUTES, _ATTRIBUTE_RULES),
        (MOVING_TEXT, _MOVING_TEXT_RULES),
        (DOM_ORDER, _DOM_ORDER_RULES),
    ):
        checks.extend(ScanCheck(category, name, RuleSelector.for_rules(rule)) for name, rule in rules)
    checks.extend(
        ScanCheck(STANDARDS, name, RuleSelector.for_tags(*tags, exclude=exclude))
        for name, tags, exclude in _STANDARD_SWEEPS
    )
    return CheckCatalog(target, checks)


def _as_list(entry: Mapping[str, Any], key: str) -> List[str]:
    value = entry.get(key) or []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise CatalogError(f"'{key}' must be a string or a list of strings in {dict(entry)!r}")
    return value


def load_catalog_file(path: Path) -> List[ScanCheck]:
    """Read extra scan checks from a YAML file.

    Expected layout::

        checks:
          - category: Forms
            name: form fields have labels
            rules: [label]
          - category: Standards sweeps
            name: automated WCAG 2.2 AA rules
            tags: [wcag22aa]
            exclude: [color-contrast]
    """

    logger = logging.getLogger("catalog")
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"Cannot read catalog file {path}: {exc}") from exc

    entries = document.get("checks") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise CatalogError(f"Catalog file {path} must contain a 'checks' list")

    checks: List[ScanCheck] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise CatalogError(f"Catalog entry must be a mapping, got {entry!r}")
        category = str(entry.get("category") or "").strip()
        name = str(entry.get("name") or "").strip()
        if not category or not name:
            raise CatalogError(f"Catalog entry needs a category and a name: {entry!r}")
        selector = RuleSelector(
            rule_ids=tuple(_as_list(entry, "rules")),
            tags=tuple(_as_list(entry, "tags")),
            excluded_rule_ids=tuple(_as_list(entry, "exclude")),
        )
        checks.append(ScanCheck(category, name, selector))

    log_event(logger, logging.INFO, "catalog.load", path=str(path), checks=len(checks))
    return checks


__all__ = [
    "ATTRIBUTES",
    "CATEGORY_NOTES",
    "CheckCatalog",
    "DOM_ORDER",
    "FOCUS",
    "MOVING_TEXT",
    "SKIP_LINK_SELECTOR",
    "STANDARDS",
    "default_catalog",
    "load_catalog_file",
]
