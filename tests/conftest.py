"""Pytest configuration and shared fixtures."""

import pytest

from hh_tracker.tracker.repository import TrackerRepository


@pytest.fixture
def sample_paste() -> str:
    """A paste from the hh.ru responses page with boilerplate in between."""
    return "\n".join(
        [
            "Employer Logo",
            "Senior Product Manager",
            "Acme",
            "Был онлайн 2 часа назад",
            "5 февраля",
            "Отказ",
            "Employer Logo",
            "Аналитик данных",
            "Рога и копыта",
            "Сегодня",
            "Просмотрен",
            "Получите работу быстрее с подпиской hh PRO",
        ]
    )


@pytest.fixture
async def repo(tmp_path):
    """An initialized repository backed by a temporary database."""
    repository = TrackerRepository(tmp_path / "test_tracker.db")
    await repository.initialize()
    yield repository
    await repository.close()
