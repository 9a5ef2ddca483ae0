"""Integration tests for the response tracker."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from hh_tracker.bot.handler import UpdateHandler
from hh_tracker.config.settings import Settings
from hh_tracker.tracker.models import RawEvent, RoleTag, StatsWindow, StatusTag
from hh_tracker.tracker.service import FinalizeOutcome, TrackerService

FIRST_HALF = "\n".join(
    [
        "Employer Logo",
        "Senior Product Manager",
        "Acme",
        "Был онлайн 3 дня назад",
        "5 февраля",
        "Отказ",
        "Product Marketing Manager",
    ]
)
SECOND_HALF = "\n".join(
    [
        "Beta",
        "Вчера",
        "Приглашение",
        "Руководитель проектов",
        "Gamma",
        "Собеседование",
        "Получите работу быстрее с подпиской hh PRO",
    ]
)


class TestFullWorkflow:
    """Test the paste, finalize, stats workflow end-to-end."""

    @pytest.fixture
    def handler(self, repo):
        return UpdateHandler(repo, Settings(_env_file=None))

    async def test_split_paste_with_redelivery(self, handler):
        """A paste split over two messages, one redelivered, is stored once."""
        repo = handler.repository
        events = [
            RawEvent(event_id=1, user_id=5, text="/new", chat_id=50),
            RawEvent(event_id=2, user_id=5, text=FIRST_HALF, chat_id=50),
            RawEvent(event_id=2, user_id=5, text=FIRST_HALF, chat_id=50),
            RawEvent(event_id=3, user_id=5, text=SECOND_HALF, chat_id=50),
        ]
        for event in events:
            await handler.handle_event(event)

        assert (await repo.read_buffer(5)).count("Senior Product Manager") == 1

        replies = await handler.handle_event(
            RawEvent(event_id=4, user_id=5, text="/done", chat_id=50)
        )
        assert "Добавлено: 3. Дублей: 0." in replies[0].text

        records = await repo.list_records(5)
        assert [(r.title, r.company) for r in records] == [
            ("Senior Product Manager", "Acme"),
            ("Product Marketing Manager", "Beta"),
            ("Руководитель проектов", "Gamma"),
        ]
        assert records[1].role_family == RoleTag.PRODUCT_MARKETING
        assert records[2].status == StatusTag.INTERVIEW

        stats = await repo.aggregate(5, StatsWindow.last_days(30))
        assert stats.total == 3
        assert stats.by_status[StatusTag.INVITED] == 1

    async def test_second_submission_only_adds_new(self, repo):
        """Historical duplicates are skipped at the storage boundary."""
        service = TrackerService(repo)

        await service.append_text(1, FIRST_HALF + "\n" + SECOND_HALF)
        first = await service.finalize(1)

        await service.append_text(1, FIRST_HALF + "\n" + SECOND_HALF)
        await service.append_text(1, "Analyst\nOmega\nСегодня\nНе просмотрен")
        second = await service.finalize(1)

        assert first.outcome == FinalizeOutcome.SAVED
        assert first.inserted == 3
        assert second.inserted == 1
        assert second.duplicates == 3
        assert len(await repo.list_records(1)) == 4

    async def test_concurrent_users(self, repo):
        """Finalizing for several users at once keeps data separate."""
        service = TrackerService(repo)

        async def run(user_id: int) -> int:
            await service.append_text(user_id, f"Analyst\nCompany {user_id}\nОтказ")
            result = await service.finalize(user_id)
            return result.inserted

        inserted = await asyncio.gather(*(run(u) for u in range(1, 11)))

        assert inserted == [1] * 10
        for user_id in range(1, 11):
            records = await repo.list_records(user_id)
            assert [r.company for r in records] == [f"Company {user_id}"]

    async def test_windowed_stats_over_import_times(self, repo):
        """Window boundaries use import time, not the parsed date."""
        from hh_tracker.parser.pipeline import ingest

        now = datetime.now(UTC)
        records = ingest("A\nX\nОтказ\nB\nY\nОтказ\nC\nZ\nОтказ")
        for record, days_ago in zip(records, [0, 3, 10]):
            await repo.insert_if_absent(
                1, record, imported_at=now - timedelta(days=days_ago)
            )

        stats = await repo.aggregate(1, StatsWindow.last_days(7), now=now)

        assert stats.total == 2
        # Equal counts keep import order: Y was imported before X.
        assert stats.top_companies == [("Y", 1), ("X", 1)]
        assert len(stats.daily) == 2
