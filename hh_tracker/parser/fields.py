"""Title, company and date extraction from a single block."""

from __future__ import annotations

import re
from dataclasses import dataclass

from hh_tracker.parser.vocabulary import MONTHS, RELATIVE_DATES
from hh_tracker.tracker.models import UNKNOWN

# "5 февраля", "12 марта 2024" (the year is ignored)
DAY_MONTH_PATTERN = re.compile(r"\b(\d{1,2})\s+([а-яё]+)\b")

_MONTHS = frozenset(MONTHS)


@dataclass(frozen=True)
class ExtractedFields:
    title: str
    company: str
    response_date: str


def match_date(line: str) -> str | None:
    """Return the date a line denotes, or None.

    "Сегодня"/"Вчера" are returned as written; a day-month pair is
    returned as "<day> <month>" in lower case.
    """
    lowered = line.lower()
    if lowered in RELATIVE_DATES:
        return line
    match = DAY_MONTH_PATTERN.search(lowered)
    if match and match.group(2) in _MONTHS:
        return f"{match.group(1)} {match.group(2)}"
    return None


def is_date_line(line: str) -> bool:
    """True for lines that carry a response date and are never a title."""
    return match_date(line) is not None


def extract_fields(lines: list[str]) -> ExtractedFields:
    """Pick title, company and date out of a block's lines.

    The first date-shaped line is the response date. All date-shaped lines
    are then removed, and the first two remaining lines are the title and
    the company. Anything missing becomes "Unknown".
    """
    response_date: str | None = None
    candidates: list[str] = []

    for line in lines:
        found = match_date(line)
        if found is None:
            candidates.append(line)
        elif response_date is None:
            response_date = found

    return ExtractedFields(
        title=candidates[0] if candidates else UNKNOWN,
        company=candidates[1] if len(candidates) > 1 else UNKNOWN,
        response_date=response_date or UNKNOWN,
    )
