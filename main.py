"""Точка входа: обработка одного события завершения анкеты из stdin"""
import asyncio
import logging
import sys

from aiogram import Bot

from handlers import Response, handle_event
from models import create_engine, create_session_maker, init_db
from services import (
    CompletionWorkflow,
    SqlQuestionnaireResultStore,
    SqlQuestionnaireStore,
    SqlScheduledQuestionnaireStore,
    TelegramNotifier,
)
from utils.config import Settings, load_settings

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


async def main(raw_event: str, settings: Settings) -> Response:
    """Собрать компоненты, обработать событие и освободить ресурсы"""
    logger.info("Инициализация базы данных...")
    engine = create_engine(settings.database_url)
    await init_db(engine)

    bot = Bot(token=settings.bot_token)
    session_maker = create_session_maker(engine)
    workflow = CompletionWorkflow(
        questionnaires=SqlQuestionnaireStore(session_maker),
        schedules=SqlScheduledQuestionnaireStore(session_maker),
        results=SqlQuestionnaireResultStore(session_maker),
        notifier=TelegramNotifier(bot, settings.notify_chat_id),
        detach=settings.detach_background_tasks,
    )

    try:
        response = await handle_event(workflow, raw_event)
        # Фоновые задачи должны завершиться до закрытия сессии бота и движка
        await workflow.drain()
    finally:
        await bot.session.close()
        await engine.dispose()

    logger.info("Ответ: %s %s", response.status_code, response.body)
    return response


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings)
    try:
        response = asyncio.run(main(sys.stdin.read(), settings))
    except KeyboardInterrupt:
        logger.info("Остановлено пользователем")
        sys.exit(130)
    print(f"{response.status_code} {response.body}")
    sys.exit(0 if response.success else 1)
