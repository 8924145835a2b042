"""Уведомления о новых расписаниях и завершении серии"""
import logging
from typing import Protocol, Union

from aiogram import Bot

logger = logging.getLogger(__name__)


def new_schedule_text(schedule_id: str, participant_id: str) -> str:
    return f"New schedule created with ID: {schedule_id} for participant with ID: {participant_id}"


def series_completed_text(participant_id: str) -> str:
    return f"User {participant_id} has completed all scheduled questionnaires."


class Notifier(Protocol):
    async def notify_new_schedule(self, schedule_id: str, participant_id: str) -> None:
        ...

    async def notify_series_completed(self, participant_id: str) -> None:
        ...


class TelegramNotifier:
    """Отправляет текстовые уведомления в один чат через aiogram.

    Уведомления необязательны: ошибки отправки пишутся в лог и не
    пробрасываются вызывающему коду.
    """

    def __init__(self, bot: Bot, chat_id: Union[int, str]):
        self.bot = bot
        self.chat_id = chat_id

    async def notify_new_schedule(self, schedule_id: str, participant_id: str) -> None:
        await self._send(new_schedule_text(schedule_id, participant_id))

    async def notify_series_completed(self, participant_id: str) -> None:
        await self._send(series_completed_text(participant_id))

    async def _send(self, text: str) -> bool:
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except Exception:
            logger.exception("Не удалось отправить уведомление в чат %s", self.chat_id)
            return False
        logger.info("Уведомление отправлено: %s", text)
        return True
