"""Declarative selection of the accessibility rules a scan runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import InvalidSelectorError

RULE_MODE = "rule"
TAG_MODE = "tag"


def _ordered_unique(values: Iterable[str] | str) -> Tuple[str, ...]:
    if isinstance(values, str):
        values = (values,)
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(str(value).strip(), None)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class RuleSelector:
    """Which engine rules to run: explicit ids or standards tags, minus exclusions.

    ``rule_ids`` and ``tags`` are alternative modes and exactly one of them
    must be non-empty. ``excluded_rule_ids`` composes with either mode but
    must only name rules the selection actually contains; excluding a rule
    that was never selected is treated as an authoring mistake.
    """

    rule_ids: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    excluded_rule_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rule_ids", _ordered_unique(self.rule_ids))
        object.__setattr__(self, "tags", _ordered_unique(self.tags))
        object.__setattr__(self, "excluded_rule_ids", _ordered_unique(self.excluded_rule_ids))

    @classmethod
    def for_rules(cls, *rule_ids: str, exclude: Iterable[str] = ()) -> "RuleSelector":
        return cls(rule_ids=tuple(rule_ids), excluded_rule_ids=tuple(exclude))

    @classmethod
    def for_tags(cls, *tags: str, exclude: Iterable[str] = ()) -> "RuleSelector":
        return cls(tags=tuple(tags), excluded_rule_ids=tuple(exclude))

    @property
    def mode(self) -> Optional[str]:
        if self.rule_ids and not self.tags:
            return RULE_MODE
        if self.tags and not self.rule_ids:
            return TAG_MODE
        return None

    def describe(self) -> str:
        """Return a short human readable summary of the selection."""

        if self.mode == RULE_MODE:
            text = f"rules {', '.join(self.rule_ids)}"
        elif self.mode == TAG_MODE:
            text = f"tags {', '.join(self.tags)}"
        else:
            text = "invalid selection"
        if self.excluded_rule_ids:
            text = f"{text} excluding {', '.join(self.excluded_rule_ids)}"
        return text

    def validate(self) -> "RuleSelector":
        """Check the selector without consulting the engine.

        Raises :class:`InvalidSelectorError` when both modes are used, when
        neither is, when a value is blank, or when a rule-id selection
        excludes something it never selected or excludes everything.
        """

        if self.rule_ids and self.tags:
            raise InvalidSelectorError(
                f"Selector mixes rule ids ({', '.join(self.rule_ids)}) "
                f"and tags ({', '.join(self.tags)}); use exactly one mode"
            )
        if not self.rule_ids and not self.tags:
            raise InvalidSelectorError("Selector selects no rules")
        for value in (*self.rule_ids, *self.tags, *self.excluded_rule_ids):
            if not value:
                raise InvalidSelectorError("Selector contains a blank rule id or tag")

        if self.mode == RULE_MODE:
            stray = [rule for rule in self.excluded_rule_ids if rule not in self.rule_ids]
            if stray:
                raise InvalidSelectorError(
                    f"Excluded rules {', '.join(stray)} are not part of the selection"
                )
            if len(self.excluded_rule_ids) == len(self.rule_ids):
                raise InvalidSelectorError("Exclusions remove every selected rule")
        return self

    def resolve(self, known_rules: Mapping[str, Iterable[str]]) -> Tuple[str, ...]:
        """Return the effective rule ids against the engine's rule catalog.

        ``known_rules`` maps each rule id the engine knows to its tags. The
        result keeps the engine's catalog order in tag mode and the declared
        order in rule mode.
        """

        self.validate()
        if self.mode == RULE_MODE:
            unknown = [rule for rule in self.rule_ids if rule not in known_rules]
            if unknown:
                raise InvalidSelectorError(f"Unknown rule ids: {', '.join(unknown)}")
            selected = self.rule_ids
        else:
            wanted = set(self.tags)
            selected = tuple(rule for rule, tags in known_rules.items() if wanted.intersection(tags))
            if not selected:
                raise InvalidSelectorError(f"Tags {', '.join(self.tags)} select no known rule")

        stray = [rule for rule in self.excluded_rule_ids if rule not in selected]
        if stray:
            raise InvalidSelectorError(
                f"Excluded rules {', '.join(stray)} are not part of the selection"
            )
        effective = tuple(rule for rule in selected if rule not in self.excluded_rule_ids)
        if not effective:
            raise InvalidSelectorError("Exclusions remove every selected rule")
        return effective

    def to_axe_options(self) -> Dict[str, Any]:
        """Translate the selector into ``axe.run`` options.

        axe-core ignores the ``rules`` facet for rules named in a rule-type
        ``runOnly``, so rule-id exclusions are applied to the values list and
        only tag sweeps carry disabled rules.
        """

        self.validate()
        if self.mode == RULE_MODE:
            values = [rule for rule in self.rule_ids if rule not in self.excluded_rule_ids]
        else:
            values = list(self.tags)
        options: Dict[str, Any] = {
            "runOnly": {"type": self.mode, "values": values},
            "resultTypes": ["violations"],
        }
        if self.mode == TAG_MODE and self.excluded_rule_ids:
            options["rules"] = {rule: {"enabled": False} for rule in self.excluded_rule_ids}
        return options


__all__ = ["RULE_MODE", "TAG_MODE", "RuleSelector"]
