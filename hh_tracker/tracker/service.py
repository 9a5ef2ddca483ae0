"""Business logic service for the response tracker.

This module provides the TrackerService class which handles:
- accumulating pasted text in the user's buffer
- finalizing the buffer into stored, deduplicated responses
- windowed stats over stored responses
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from hh_tracker.parser.pipeline import ingest
from hh_tracker.parser.vocabulary import NOISE_SUBSTRINGS
from hh_tracker.tracker.models import CandidateRecord, Stats, StatsWindow
from hh_tracker.tracker.repository import TrackerRepository
from hh_tracker.tracker.stats import DEFAULT_TOP_COMPANIES
from hh_tracker.utils.logging import get_logger

logger = get_logger("service")


class FinalizeOutcome(str, Enum):
    """What happened when a buffer was finalized."""

    EMPTY_BUFFER = "empty_buffer"
    NOTHING_PARSED = "nothing_parsed"
    SAVED = "saved"


@dataclass
class FinalizeResult:
    outcome: FinalizeOutcome
    parsed: int = 0
    inserted: int = 0
    duplicates: int = 0
    inserted_records: list[CandidateRecord] = field(default_factory=list)


class TrackerService:
    """Coordinates the parser and the repository.

    The service owns no state of its own: every call reads and writes
    through the repository, and each repository call is atomic.
    """

    def __init__(
        self,
        repository: TrackerRepository,
        noise: Iterable[str] = NOISE_SUBSTRINGS,
        top_k: int = DEFAULT_TOP_COMPANIES,
    ):
        """Initialize the service.

        Args:
            repository: The TrackerRepository instance for database access.
            noise: Boilerplate substrings passed to the parser.
            top_k: Number of companies reported by ``stats``.
        """
        self.repository = repository
        self.noise = tuple(noise)
        self.top_k = top_k

    async def append_text(self, user_id: int, text: str) -> None:
        await self.repository.append_buffer(user_id, text)

    async def reset(self, user_id: int) -> None:
        await self.repository.clear_buffer(user_id)

    async def read_buffer(self, user_id: int) -> str:
        return await self.repository.read_buffer(user_id)

    async def preview(self, user_id: int) -> list[CandidateRecord]:
        """Parse the current buffer without storing anything."""
        return ingest(await self.repository.read_buffer(user_id), self.noise)

    async def finalize(self, user_id: int) -> FinalizeResult:
        """Parse the user's buffer, store new records and clear the buffer.

        The buffer is cleared only after the records were stored. If the
        repository raises, the error propagates and the buffer stays, so
        the user can retry without pasting again. A buffer that yields no
        records is kept as well: the rest of the paste may still come.

        Args:
            user_id: Owner of the buffer.

        Returns:
            The outcome with inserted and duplicate counts.
        """
        text = await self.repository.read_buffer(user_id)
        if not text.strip():
            return FinalizeResult(outcome=FinalizeOutcome.EMPTY_BUFFER)

        records = ingest(text, self.noise)
        if not records:
            logger.info("User %s: buffer has no complete responses", user_id)
            return FinalizeResult(outcome=FinalizeOutcome.NOTHING_PARSED)

        stored = await self.repository.insert_many(user_id, records)
        await self.repository.clear_buffer(user_id)

        logger.info(
            "User %s: parsed %d, inserted %d, duplicates %d",
            user_id,
            len(records),
            stored.inserted,
            stored.duplicates,
        )
        return FinalizeResult(
            outcome=FinalizeOutcome.SAVED,
            parsed=len(records),
            inserted=stored.inserted,
            duplicates=stored.duplicates,
            inserted_records=stored.inserted_records,
        )

    async def stats(self, user_id: int, days: int | None = None) -> Stats:
        """Stats over the last ``days`` days, or all time when None."""
        window = StatsWindow(days=days)
        return await self.repository.aggregate(user_id, window, top_k=self.top_k)
