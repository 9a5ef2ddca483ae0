"""Heuristic role family and grade classification of vacancy titles.

Both classifiers walk an ordered rule table and return the tag of the
first rule whose patterns all match the case-folded title. The tables are
plain tuples so callers can pass their own precedence.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from hh_tracker.tracker.models import GradeTag, RoleTag


@dataclass(frozen=True)
class ClassificationRule:
    """A tag plus the patterns that must all be found in the title."""

    tag: Enum
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, text: str) -> bool:
        return all(pattern.search(text) for pattern in self.patterns)


def _rule(tag: Enum, *patterns: str) -> ClassificationRule:
    return ClassificationRule(tag=tag, patterns=tuple(re.compile(p) for p in patterns))


_PRODUCT = r"product|продакт|продукт"
_MARKETING = r"marketing|маркет"

ROLE_RULES: tuple[ClassificationRule, ...] = (
    # "Product Marketing Manager" is neither plain product nor plain marketing
    _rule(RoleTag.PRODUCT_MARKETING, _MARKETING, _PRODUCT),
    _rule(RoleTag.ANALYST, r"analyst|аналит"),
    _rule(RoleTag.PROJECT, r"project|проджект|проект"),
    _rule(RoleTag.MARKETING, _MARKETING),
    _rule(RoleTag.PRODUCT, _PRODUCT),
)

# Junior is checked before lead: "Junior Team Lead" is junior.
GRADE_RULES: tuple[ClassificationRule, ...] = (
    _rule(GradeTag.JUNIOR, r"junior|джун|младш|intern|стаж"),
    _rule(GradeTag.LEAD, r"lead|team\s*lead|тим\s*лид|тимлид|head|руковод"),
    _rule(GradeTag.SENIOR, r"senior|старш"),
)


def classify(title: str, rules: Sequence[ClassificationRule], default: Enum) -> Enum:
    """Return the tag of the first matching rule, or ``default``."""
    text = (title or "").casefold()
    for rule in rules:
        if rule.matches(text):
            return rule.tag
    return default


def role_family(
    title: str, rules: Sequence[ClassificationRule] = ROLE_RULES
) -> RoleTag:
    """Infer the role family of a vacancy title; "other" when nothing matches."""
    return classify(title, rules, RoleTag.OTHER)


def grade(title: str, rules: Sequence[ClassificationRule] = GRADE_RULES) -> GradeTag:
    """Infer the seniority grade of a vacancy title; "middle" by default."""
    return classify(title, rules, GradeTag.MIDDLE)
