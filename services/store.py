"""Хранилища сущностей поверх асинхронного SQLAlchemy"""
import logging
from typing import Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import Participant, Questionnaire, QuestionnaireResult, ScheduledQuestionnaire, ScheduleStatus
from utils.errors import NotFound, PersistenceError, ScheduleConflict

logger = logging.getLogger(__name__)


class QuestionnaireStore(Protocol):
    async def get_questionnaire(self, questionnaire_id: str, study_id: Optional[str] = None) -> Questionnaire:
        ...


class ScheduledQuestionnaireStore(Protocol):
    async def get_pending_schedule(
        self, questionnaire_id: str, participant_id: str, study_id: Optional[str] = None
    ) -> ScheduledQuestionnaire:
        ...

    async def mark_schedule_completed(self, schedule_id: str) -> None:
        ...

    async def create_schedule(self, schedule: ScheduledQuestionnaire) -> None:
        ...


class QuestionnaireResultStore(Protocol):
    async def create_result(self, result: QuestionnaireResult) -> None:
        ...


class ParticipantStore(Protocol):
    async def get_participant(self, participant_id: str) -> Participant:
        ...


class SqlStore:
    """Общая часть SQL-хранилищ: отдельная сессия на каждый вызов"""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def _fetch(self, query, limit: int = 1) -> list:
        try:
            async with self.session_maker() as session:
                result = await session.execute(query.limit(limit))
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError(f"query failed: {exc}") from exc
        except ValueError as exc:
            # Строка в БД не разбирается, например время не в формате YYYY-MM-DD HH:MM:SS
            raise PersistenceError(f"stored row cannot be decoded: {exc}") from exc

    async def _insert(self, obj) -> None:
        try:
            async with self.session_maker() as session:
                session.add(obj)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"insert into {obj.__tablename__} failed: {exc}") from exc


class SqlQuestionnaireStore(SqlStore):

    async def get_questionnaire(self, questionnaire_id: str, study_id: Optional[str] = None) -> Questionnaire:
        """Найти анкету по id (и по исследованию, если оно указано)"""
        query = select(Questionnaire).where(Questionnaire.id == questionnaire_id)
        if study_id:
            query = query.where(Questionnaire.study_id == study_id)

        rows = await self._fetch(query)
        if not rows:
            if study_id:
                raise NotFound(f"questionnaire not found with ID: {questionnaire_id} and Study ID: {study_id}")
            raise NotFound(f"questionnaire not found with ID: {questionnaire_id}")
        return rows[0]


class SqlScheduledQuestionnaireStore(SqlStore):

    async def get_pending_schedule(
        self, questionnaire_id: str, participant_id: str, study_id: Optional[str] = None
    ) -> ScheduledQuestionnaire:
        """Найти ожидающее расписание для пары (анкета, участник)"""
        query = select(ScheduledQuestionnaire).where(
            ScheduledQuestionnaire.questionnaire_id == questionnaire_id,
            ScheduledQuestionnaire.participant_id == participant_id,
            ScheduledQuestionnaire.status == ScheduleStatus.PENDING,
        )
        if study_id:
            # У расписания нет study_id, исследование берём из анкеты
            query = query.join(
                Questionnaire, Questionnaire.id == ScheduledQuestionnaire.questionnaire_id
            ).where(Questionnaire.study_id == study_id)
        query = query.order_by(ScheduledQuestionnaire.scheduled_at, ScheduledQuestionnaire.id)

        rows = await self._fetch(query, limit=2)
        if not rows:
            raise NotFound(
                f"scheduled questionnaire not found with Questionnaire ID: {questionnaire_id}, "
                f"User ID: {participant_id}"
            )
        if len(rows) > 1:
            logger.warning(
                "Несколько ожидающих расписаний для анкеты %s и участника %s, используется %s",
                questionnaire_id, participant_id, rows[0].id
            )
        return rows[0]

    async def mark_schedule_completed(self, schedule_id: str) -> None:
        """Перевести расписание в completed, только если оно ещё pending"""
        statement = (
            update(ScheduledQuestionnaire)
            .where(
                ScheduledQuestionnaire.id == schedule_id,
                ScheduledQuestionnaire.status == ScheduleStatus.PENDING,
            )
            .values(status=ScheduleStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session_maker() as session:
                result = await session.execute(statement)
                updated = result.rowcount
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"update of scheduled questionnaire {schedule_id} failed: {exc}") from exc

        if updated == 0:
            raise ScheduleConflict(schedule_id)

    async def create_schedule(self, schedule: ScheduledQuestionnaire) -> None:
        """Сохранить новое расписание; статус всегда pending"""
        schedule.status = ScheduleStatus.PENDING
        await self._insert(schedule)


class SqlQuestionnaireResultStore(SqlStore):

    async def create_result(self, result: QuestionnaireResult) -> None:
        await self._insert(result)


class SqlParticipantStore(SqlStore):

    async def get_participant(self, participant_id: str) -> Participant:
        rows = await self._fetch(select(Participant).where(Participant.id == participant_id))
        if not rows:
            raise NotFound(f"participant not found with ID: {participant_id}")
        return rows[0]
