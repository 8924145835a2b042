"""Тесты уведомлений"""
import pytest

from services import TelegramNotifier
from services.notifier import new_schedule_text, series_completed_text


class FakeBot:
    """Подменяет aiogram Bot: запоминает сообщения или падает"""

    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_message(self, chat_id, text):
        if self.error:
            raise self.error
        self.sent.append((chat_id, text))


@pytest.mark.asyncio
async def test_notify_new_schedule():
    bot = FakeBot()
    notifier = TelegramNotifier(bot, chat_id=-100500)

    await notifier.notify_new_schedule("sched-1", "user-1")

    assert bot.sent == [(-100500, "New schedule created with ID: sched-1 for participant with ID: user-1")]


@pytest.mark.asyncio
async def test_notify_series_completed():
    bot = FakeBot()
    notifier = TelegramNotifier(bot, chat_id="@rescheduler")

    await notifier.notify_series_completed("user-1")

    assert bot.sent == [("@rescheduler", "User user-1 has completed all scheduled questionnaires.")]


@pytest.mark.asyncio
async def test_send_failure_is_logged_not_raised(caplog):
    """Тест: ошибка отправки не пробрасывается"""
    notifier = TelegramNotifier(FakeBot(error=ConnectionError("network down")), chat_id=1)

    await notifier.notify_series_completed("user-1")
    sent = await notifier._send("text")

    assert sent is False
    assert "Не удалось отправить уведомление" in caplog.text


def test_message_texts():
    assert new_schedule_text("a", "b") == "New schedule created with ID: a for participant with ID: b"
    assert series_completed_text("b") == "User b has completed all scheduled questionnaires."
