"""Chat command handling, independent of any transport.

The transport hands every inbound update to ``UpdateHandler.handle_event``
and sends back the returned replies. Redelivered updates are dropped by the
idempotency gate before anything else happens.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from hh_tracker.config.settings import Settings
from hh_tracker.tracker.models import RawEvent, Stats, StatusTag
from hh_tracker.tracker.repository import TrackerRepository
from hh_tracker.tracker.service import FinalizeOutcome, TrackerService
from hh_tracker.utils.logging import get_logger

logger = get_logger("bot")

HELP_TEXT = (
    "Привет! Я HH Tracker.\n\n"
    "Как пользоваться:\n"
    "1) /new\n"
    "2) Вставляй копипасту из hh.ru (можно частями)\n"
    "3) /done, я распарсю и сохраню\n\n"
    "Команды:\n"
    "/new: очистить буфер\n"
    "/done: распарсить и сохранить\n"
    "/stats: статистика\n"
    "/reset: очистить буфер"
)
RESET_TEXT = "Ок. Буфер очищен. Теперь кидай текст из hh, потом /done."
EMPTY_BUFFER_TEXT = "Буфер пустой. Вставь текст из hh и потом /done."
NOTHING_PARSED_TEXT = (
    "Ничего не распарсил. Проверь, что вставляешь список откликов + статус "
    "(Отказ/Просмотрен/...)."
)
ACK_TEXT = "Принял. Можешь прислать ещё или /done."
UNKNOWN_COMMAND_TEXT = "Не понял команду. Напиши /start."
ERROR_TEXT = "Ошибка при обработке. Попробуй ещё раз или /start."

# Order in which statuses appear in the stats summary.
STATUS_ORDER = (
    StatusTag.NOT_VIEWED,
    StatusTag.VIEWED,
    StatusTag.TEST_TASK,
    StatusTag.INVITED,
    StatusTag.INTERVIEW,
    StatusTag.REJECTED,
)


@dataclass(frozen=True)
class Reply:
    chat_id: int
    text: str


def format_stats(stats: Stats, recent_days: int = 7) -> str:
    """Render stats as a plain-text chat message."""
    if stats.window.days is None:
        header = "📊 Статистика за всё время"
    else:
        header = f"📊 Статистика за {stats.window.days} дней"

    breakdown = "\n".join(
        f"• {status.value}: {stats.by_status[status]}"
        for status in STATUS_ORDER
        if status in stats.by_status
    ) or "• пока пусто"
    roles = ", ".join(f"{role.value}: {n}" for role, n in stats.by_role.items()) or "—"
    grades = ", ".join(f"{g.value}: {n}" for g, n in stats.by_grade.items()) or "—"
    top = ", ".join(f"{name} ({count})" for name, count in stats.top_companies) or "—"
    recent = stats.daily[-recent_days:]
    activity = "\n".join(f"{day.isoformat()}: {n}" for day, n in recent) or "—"

    return (
        f"{header}\n\n"
        f"Всего откликов: {stats.total}\n\n"
        f"По статусам:\n{breakdown}\n\n"
        f"Роли: {roles}\n"
        f"Грейды: {grades}\n\n"
        f"Топ компаний: {top}\n\n"
        f"Активность (последние {recent_days} дней):\n{activity}"
    )


class UpdateHandler:
    """Applies chat updates to the tracker and builds the replies."""

    def __init__(
        self,
        repository: TrackerRepository,
        settings: Settings,
        service: TrackerService | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.repository = repository
        self.settings = settings
        self.service = service or TrackerService(
            repository,
            noise=settings.noise_substrings,
            top_k=settings.top_companies,
        )
        self._clock = clock

    async def handle_event(self, event: RawEvent) -> list[Reply]:
        """Apply one inbound update at most once.

        Returns:
            Replies to send; empty for redelivered or text-less updates.
        """
        if not await self.repository.mark_processed(event.event_id):
            return []
        if not event.text:
            return []

        chat_id = event.chat_id if event.chat_id is not None else event.user_id
        try:
            return await self._process(event.user_id, chat_id, event.text.strip())
        except Exception:
            logger.exception("Failed to process event %s", event.event_id)
            return [Reply(chat_id, ERROR_TEXT)]

    async def _process(self, user_id: int, chat_id: int, text: str) -> list[Reply]:
        user = await self.repository.ensure_user(user_id, chat_id)

        if not text.startswith("/"):
            await self.service.append_text(user_id, text)
            now_ms = int(self._clock() * 1000)
            interval_ms = int(self.settings.ack_interval_seconds * 1000)
            if user.last_ack_at and now_ms - user.last_ack_at <= interval_ms:
                return []
            await self.repository.update_last_ack_at(user_id, now_ms)
            return [Reply(chat_id, ACK_TEXT)]

        # "/done@hh_tracker_bot" in group chats
        command = text.split()[0].split("@", 1)[0].lower()

        if command in ("/start", "/help"):
            return [Reply(chat_id, HELP_TEXT)]

        if command in ("/new", "/reset"):
            await self.service.reset(user_id)
            return [Reply(chat_id, RESET_TEXT)]

        if command == "/done":
            return [Reply(chat_id, await self._finalize(user_id))]

        if command == "/stats":
            stats = await self.service.stats(user_id, self.settings.stats_window_days)
            return [Reply(chat_id, format_stats(stats))]

        return [Reply(chat_id, UNKNOWN_COMMAND_TEXT)]

    async def _finalize(self, user_id: int) -> str:
        result = await self.service.finalize(user_id)

        if result.outcome == FinalizeOutcome.EMPTY_BUFFER:
            return EMPTY_BUFFER_TEXT
        if result.outcome == FinalizeOutcome.NOTHING_PARSED:
            return NOTHING_PARSED_TEXT
        return (
            f"Готово. Добавлено: {result.inserted}. Дублей: {result.duplicates}.\n\n"
            "Напиши /stats, чтобы посмотреть статистику."
        )
