"""Windowed aggregation over stored records."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, date, datetime

from hh_tracker.tracker.models import ApplicationRecord, Stats, StatsWindow

DEFAULT_TOP_COMPANIES = 5


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def aggregate_records(
    records: Iterable[ApplicationRecord],
    window: StatsWindow,
    now: datetime | None = None,
    top_k: int = DEFAULT_TOP_COMPANIES,
) -> Stats:
    """Aggregate records whose import time falls inside ``window``.

    The window is applied once and every grouping is computed from the
    same filtered list. Company ties keep the order in which companies
    were first encountered. Days without records are absent from
    ``daily``.

    Args:
        records: Records in import order.
        window: Trailing range measured from ``now``.
        now: Reference time, defaults to the current UTC time.
        top_k: Number of companies to report.

    Returns:
        The aggregated stats.
    """
    now = _as_utc(now or datetime.now(UTC))
    selected = [r for r in records if window.contains(_as_utc(r.imported_at), now)]

    by_status = Counter(r.status for r in selected)
    by_role = Counter(r.role_family for r in selected)
    by_grade = Counter(r.grade for r in selected)
    companies = Counter(r.company for r in selected)
    days: Counter[date] = Counter(_as_utc(r.imported_at).date() for r in selected)

    return Stats(
        window=window,
        total=len(selected),
        by_status=dict(by_status),
        by_role=dict(by_role),
        by_grade=dict(by_grade),
        # most_common() is stable, so equal counts stay in encounter order
        top_companies=companies.most_common(top_k),
        daily=sorted(days.items()),
    )
