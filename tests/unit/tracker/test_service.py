"""Tests for the TrackerService business logic."""

import sqlite3
from unittest.mock import AsyncMock

import pytest

from hh_tracker.tracker.models import StatusTag
from hh_tracker.tracker.service import FinalizeOutcome

PASTE = "Analyst\nAcme\nСегодня\nОтказ\nProduct Owner\nBeta\n5 февраля\nПросмотрен"


@pytest.fixture
def service(repo):
    from hh_tracker.tracker.service import TrackerService

    return TrackerService(repo)


class TestFinalize:
    """Test turning a buffer into stored records."""

    async def test_empty_buffer(self, service):
        """Finalizing without text reports an empty buffer."""
        result = await service.finalize(1)

        assert result.outcome == FinalizeOutcome.EMPTY_BUFFER
        assert result.inserted == 0

    async def test_nothing_parsed_keeps_buffer(self, service):
        """Text without status lines is kept for the rest of the paste."""
        await service.append_text(1, "Analyst\nAcme")

        result = await service.finalize(1)

        assert result.outcome == FinalizeOutcome.NOTHING_PARSED
        assert await service.read_buffer(1) == "Analyst\nAcme"

    async def test_saves_and_clears(self, service, repo):
        """Parsed records are stored and the buffer is cleared."""
        await service.append_text(1, PASTE)

        result = await service.finalize(1)

        assert result.outcome == FinalizeOutcome.SAVED
        assert (result.parsed, result.inserted, result.duplicates) == (2, 2, 0)
        assert await service.read_buffer(1) == ""
        assert len(await repo.list_records(1)) == 2

    async def test_fragments_are_joined(self, service):
        """A block split across two messages is parsed as one."""
        await service.append_text(1, "Analyst\nAcme")
        await service.append_text(1, "Сегодня\nОтказ")

        result = await service.finalize(1)

        assert result.inserted == 1
        assert result.inserted_records[0].company == "Acme"
        assert result.inserted_records[0].status == StatusTag.REJECTED

    async def test_resubmission_counts_duplicates(self, service):
        """Pasting the same responses again only adds duplicates."""
        await service.append_text(1, PASTE)
        await service.finalize(1)
        await service.append_text(1, PASTE)

        result = await service.finalize(1)

        assert result.inserted == 0
        assert result.duplicates == 2

    async def test_storage_failure_keeps_buffer(self, service, repo, monkeypatch):
        """If storing fails the error propagates and the buffer survives."""
        await service.append_text(1, PASTE)
        monkeypatch.setattr(
            repo,
            "insert_many",
            AsyncMock(side_effect=sqlite3.OperationalError("database is locked")),
        )

        with pytest.raises(sqlite3.OperationalError):
            await service.finalize(1)

        assert await service.read_buffer(1) == PASTE


class TestBufferOperations:
    """Test reset and preview."""

    async def test_reset(self, service):
        """reset clears the buffer."""
        await service.append_text(1, "a")
        await service.reset(1)

        assert await service.read_buffer(1) == ""

    async def test_preview_does_not_store(self, service, repo):
        """preview parses without touching storage."""
        await service.append_text(1, PASTE)

        records = await service.preview(1)

        assert [r.title for r in records] == ["Analyst", "Product Owner"]
        assert await repo.list_records(1) == []
        assert await service.read_buffer(1) == PASTE

    async def test_custom_noise(self, repo):
        """Noise configured on the service reaches the parser."""
        from hh_tracker.tracker.service import TrackerService

        service = TrackerService(repo, noise=["Реклама"])
        await service.append_text(1, "Реклама\nAnalyst\nAcme\nОтказ")

        records = await service.preview(1)
        assert records[0].title == "Analyst"


class TestStats:
    """Test stats through the service."""

    async def test_stats_window(self, service):
        """stats counts stored records for the given window."""
        await service.append_text(1, PASTE)
        await service.finalize(1)

        stats = await service.stats(1, days=30)
        assert stats.total == 2
        assert stats.window.days == 30

        all_time = await service.stats(1)
        assert all_time.window.days is None
        assert all_time.total == 2
