"""Data models for the response tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from enum import Enum

# Placeholder for any field the parser could not find.
UNKNOWN = "Unknown"


class StatusTag(str, Enum):
    """Response status labels exactly as hh.ru prints them."""

    NOT_VIEWED = "Не просмотрен"
    VIEWED = "Просмотрен"
    TEST_TASK = "Тестовое"
    INVITED = "Приглашение"
    INTERVIEW = "Собеседование"
    REJECTED = "Отказ"

    @classmethod
    def from_line(cls, line: str) -> StatusTag | None:
        """Return the status whose label equals ``line`` exactly, else None."""
        return _STATUS_BY_LABEL.get(line)


_STATUS_BY_LABEL: dict[str, StatusTag] = {status.value: status for status in StatusTag}


class RoleTag(str, Enum):
    """Role family inferred from a vacancy title."""

    PRODUCT = "product"
    PRODUCT_MARKETING = "product_marketing"
    PROJECT = "project"
    ANALYST = "analyst"
    MARKETING = "marketing"
    OTHER = "other"


class GradeTag(str, Enum):
    """Seniority grade inferred from a vacancy title."""

    JUNIOR = "junior"
    MIDDLE = "middle"
    SENIOR = "senior"
    LEAD = "lead"


@dataclass(frozen=True)
class RawEvent:
    """One inbound delivery from the chat transport.

    ``event_id`` is unique per update but repeats when the transport
    redelivers the same update.
    """

    event_id: int
    user_id: int
    text: str | None = None
    chat_id: int | None = None


@dataclass(frozen=True)
class Block:
    """A run of paste lines terminated by a status label."""

    lines: list[str]
    status: StatusTag


@dataclass(frozen=True)
class CandidateRecord:
    """A parsed response that has not been stored yet."""

    title: str
    company: str
    status: StatusTag
    response_date: str
    role_family: RoleTag
    grade: GradeTag
    fingerprint: str
    raw_summary: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "company": self.company,
            "status": self.status.value,
            "response_date": self.response_date,
            "role_family": self.role_family.value,
            "grade": self.grade.value,
            "fingerprint": self.fingerprint,
            "raw_summary": self.raw_summary,
        }


@dataclass
class ApplicationRecord:
    """A stored response.

    Attributes:
        id: Surrogate key assigned by the store.
        user_id: Owner of the record.
        imported_at: When the record was stored (UTC), not the parsed date.
        response_date: Date as parsed from the paste, may be "Unknown".
        company: Company name.
        title: Vacancy title.
        status: Response status.
        role_family: Inferred role family.
        grade: Inferred seniority grade.
        fingerprint: Dedup key, unique per user.
        raw_summary: "title | company | date | status" line.
    """

    id: int
    user_id: int
    imported_at: datetime
    response_date: str | None
    company: str
    title: str
    status: StatusTag
    role_family: RoleTag
    grade: GradeTag
    fingerprint: str
    raw_summary: str

    def to_dict(self) -> dict:
        """Serialize the record to a dictionary.

        Returns:
            Dictionary representation of the record.
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "imported_at": self.imported_at.isoformat(),
            "response_date": self.response_date,
            "company": self.company,
            "title": self.title,
            "status": self.status.value,
            "role_family": self.role_family.value,
            "grade": self.grade.value,
            "fingerprint": self.fingerprint,
            "raw_summary": self.raw_summary,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ApplicationRecord:
        """Deserialize a record from a dictionary.

        Args:
            data: Dictionary containing record data.

        Returns:
            ApplicationRecord instance.
        """
        imported_at = data["imported_at"]
        if not isinstance(imported_at, datetime):
            imported_at = datetime.fromisoformat(imported_at)

        return cls(
            id=int(data["id"]),
            user_id=int(data["user_id"]),
            imported_at=imported_at,
            response_date=data.get("response_date"),
            company=data["company"],
            title=data["title"],
            status=StatusTag(data["status"]),
            role_family=RoleTag(data["role_family"]),
            grade=GradeTag(data["grade"]),
            fingerprint=data["fingerprint"],
            raw_summary=data["raw_summary"],
        )


@dataclass
class InsertResult:
    """Outcome of storing a batch of candidate records."""

    inserted: int = 0
    duplicates: int = 0
    inserted_records: list[CandidateRecord] = field(default_factory=list)


@dataclass(frozen=True)
class StatsWindow:
    """Trailing time range for stats; ``days=None`` means all time."""

    days: int | None = None

    def __post_init__(self) -> None:
        if self.days is not None and self.days <= 0:
            raise ValueError("days must be > 0")

    @classmethod
    def last_days(cls, days: int) -> StatsWindow:
        return cls(days=days)

    @classmethod
    def all_time(cls) -> StatsWindow:
        return cls(days=None)

    def since(self, now: datetime | None = None) -> datetime | None:
        """Return the inclusive lower bound of the window, or None."""
        if self.days is None:
            return None
        now = now or datetime.now(UTC)
        return now - timedelta(days=self.days)

    def contains(self, moment: datetime, now: datetime | None = None) -> bool:
        start = self.since(now)
        return start is None or moment >= start


@dataclass
class Stats:
    """Aggregated counts over one window of stored records."""

    window: StatsWindow
    total: int = 0
    by_status: dict[StatusTag, int] = field(default_factory=dict)
    by_role: dict[RoleTag, int] = field(default_factory=dict)
    by_grade: dict[GradeTag, int] = field(default_factory=dict)
    top_companies: list[tuple[str, int]] = field(default_factory=list)
    daily: list[tuple[date, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "window_days": self.window.days,
            "total": self.total,
            "by_status": {k.value: v for k, v in self.by_status.items()},
            "by_role": {k.value: v for k, v in self.by_role.items()},
            "by_grade": {k.value: v for k, v in self.by_grade.items()},
            "top_companies": [
                {"name": name, "count": count} for name, count in self.top_companies
            ],
            "daily": [
                {"date": day.isoformat(), "count": count} for day, count in self.daily
            ],
        }
