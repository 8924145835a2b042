"""Обработка завершения анкеты: решение о следующей попытке и запись результата.

По событию завершения параллельно загружаются анкета и ожидающее расписание.
Если обе записи найдены, расписание переводится в completed условным
UPDATE, после чего либо создаётся следующее расписание, либо отправляется
уведомление о завершении серии. Независимо от этого сохраняется результат.

Запись нового расписания и результата по умолчанию ожидается, а ошибки
собираются в CompletionOutcome.failures. С detach=True эти записи
запускаются фоновыми задачами, ошибки только логируются, а drain()
дожидается их завершения. Уведомления всегда отправляются в фоне:
о новом расписании после записи строки, о завершении серии после
успешной записи результата (в режиме detach сразу).
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Awaitable, Dict, List, Optional, Set

from models import CompletionEvent, Questionnaire, QuestionnaireResult, ScheduledQuestionnaire, ScheduleStatus
from utils.errors import PersistenceError, ReschedulerError, ScheduleConflict
from .notifier import Notifier
from .store import QuestionnaireResultStore, QuestionnaireStore, ScheduledQuestionnaireStore

logger = logging.getLogger(__name__)

# Ответы пока не приходят в событии, сохраняем заглушку
ANSWERS_PLACEHOLDER = '{"question":"answer"}'


class OutcomeKind(str, Enum):
    COMPLETED = "completed"
    LOOKUP_FAILED = "lookup_failed"
    CONFLICT = "conflict"
    WRITE_FAILED = "write_failed"


@dataclass
class CompletionOutcome:
    kind: OutcomeKind
    schedule_id: Optional[str] = None
    next_schedule_id: Optional[str] = None
    series_completed: bool = False
    failures: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.kind == OutcomeKind.COMPLETED


def needs_follow_up(event: CompletionEvent, questionnaire: Questionnaire) -> bool:
    """Нужна ли следующая попытка: остались попытки или анкета без ограничения"""
    return event.remaining_completions > 0 or questionnaire.is_unbounded


def build_follow_up(event: CompletionEvent, questionnaire: Questionnaire) -> ScheduledQuestionnaire:
    """Новое расписание через hours_between_attempts часов после завершения"""
    next_time = event.completed_at + timedelta(hours=questionnaire.hours_between_attempts)
    return ScheduledQuestionnaire(
        id=str(uuid.uuid4()),
        questionnaire_id=questionnaire.id,
        participant_id=event.user_id,
        scheduled_at=next_time,
        status=ScheduleStatus.PENDING,
    )


def build_result(
    event: CompletionEvent, questionnaire: Questionnaire, schedule: ScheduledQuestionnaire
) -> QuestionnaireResult:
    return QuestionnaireResult(
        id=str(uuid.uuid4()),
        answers=ANSWERS_PLACEHOLDER,
        questionnaire_id=questionnaire.id,
        participant_id=event.user_id,
        questionnaire_schedule_id=schedule.id,
        completed_at=event.completed_at,
    )


class CompletionWorkflow:
    """Обработчик событий завершения анкеты"""

    def __init__(
        self,
        questionnaires: QuestionnaireStore,
        schedules: ScheduledQuestionnaireStore,
        results: QuestionnaireResultStore,
        notifier: Notifier,
        detach: bool = False,
    ):
        self.questionnaires = questionnaires
        self.schedules = schedules
        self.results = results
        self.notifier = notifier
        self.detach = detach
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def handle_completion(self, event: CompletionEvent) -> CompletionOutcome:
        logger.info(
            "Событие %s: анкета %s завершена участником %s в %s, осталось попыток: %s",
            event.id, event.questionnaire_id, event.user_id, event.completed_at, event.remaining_completions
        )

        # Анкету и расписание ищем одновременно; первая ошибка прерывает обработку
        try:
            questionnaire, schedule = await asyncio.gather(
                self.questionnaires.get_questionnaire(event.questionnaire_id),
                self.schedules.get_pending_schedule(event.questionnaire_id, event.user_id),
            )
        except ReschedulerError as exc:
            logger.error("Событие %s: ошибка поиска анкеты или расписания: %s", event.id, exc)
            return CompletionOutcome(OutcomeKind.LOOKUP_FAILED, error=str(exc))

        # Расписание закрываем до остальных записей, чтобы параллельное
        # событие для той же пары не создало второе расписание
        try:
            await self.schedules.mark_schedule_completed(schedule.id)
        except ScheduleConflict as exc:
            logger.warning("Событие %s: %s", event.id, exc)
            return CompletionOutcome(OutcomeKind.CONFLICT, schedule_id=schedule.id, error=str(exc))
        except PersistenceError as exc:
            logger.error("Событие %s: не удалось закрыть расписание %s: %s", event.id, schedule.id, exc)
            return CompletionOutcome(
                OutcomeKind.WRITE_FAILED,
                schedule_id=schedule.id,
                failures=["mark_schedule_completed"],
                error=str(exc),
            )

        outcome = CompletionOutcome(OutcomeKind.COMPLETED, schedule_id=schedule.id)
        writes: Dict[str, Awaitable[None]] = {}

        if needs_follow_up(event, questionnaire):
            follow_up = build_follow_up(event, questionnaire)
            outcome.next_schedule_id = follow_up.id
            writes["create_schedule"] = self._create_follow_up(follow_up)
        else:
            outcome.series_completed = True

        writes["create_result"] = self.results.create_result(build_result(event, questionnaire, schedule))

        if self.detach:
            for name, write in writes.items():
                self._spawn(name, write)
            if outcome.series_completed:
                self._notify_series_completed(event.user_id)
            return outcome

        names = list(writes)
        results = await asyncio.gather(*writes.values(), return_exceptions=True)
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error("Событие %s: шаг %s завершился ошибкой: %s", event.id, name, result)
                outcome.failures.append(name)

        if outcome.failures:
            outcome.kind = OutcomeKind.WRITE_FAILED
            outcome.error = f"failed steps: {', '.join(outcome.failures)}"
        elif outcome.series_completed:
            # Как и для нового расписания, уведомляем только после успешной записи
            self._notify_series_completed(event.user_id)
        return outcome

    def _notify_series_completed(self, participant_id: str):
        self._spawn("notify_series_completed", self.notifier.notify_series_completed(participant_id))

    async def _create_follow_up(self, schedule: ScheduledQuestionnaire) -> None:
        await self.schedules.create_schedule(schedule)
        logger.info(
            "Создано расписание %s для участника %s на %s",
            schedule.id, schedule.participant_id, schedule.scheduled_at
        )
        self._spawn(
            "notify_new_schedule",
            self.notifier.notify_new_schedule(schedule.id, schedule.participant_id),
        )

    def _spawn(self, name: str, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.create_task(self._run_in_background(name, coro))
        # Держим ссылку на задачу, иначе её может собрать GC
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    async def _run_in_background(name: str, coro: Awaitable[None]) -> None:
        try:
            await coro
        except Exception:
            logger.exception("Фоновая операция %s завершилась ошибкой", name)

    async def drain(self):
        """Дождаться всех фоновых задач, включая порождённые ими"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
