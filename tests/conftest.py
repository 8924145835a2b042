"""Общие фикстуры тестов"""
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from models import (
    Base,
    Participant,
    Questionnaire,
    ScheduledQuestionnaire,
    ScheduleStatus,
    create_session_maker,
)
from services import (
    CompletionWorkflow,
    SqlQuestionnaireResultStore,
    SqlQuestionnaireStore,
    SqlScheduledQuestionnaireStore,
)

QUESTIONNAIRE_ID = "24b6f062-df29-4e6a-abb4-403e01671e4a"
PARTICIPANT_ID = "8a4378cd-27b9-4a36-afee-829b42eeb1b5"
SCHEDULE_ID = "5f1d3c9e-0000-4000-8000-000000000001"
STUDY_ID = "Study5"


class RecordingNotifier:
    """Запоминает отправленные уведомления"""

    def __init__(self):
        self.new_schedules = []
        self.completed_series = []

    async def notify_new_schedule(self, schedule_id, participant_id):
        self.new_schedules.append((schedule_id, participant_id))

    async def notify_series_completed(self, participant_id):
        self.completed_series.append(participant_id)

    @property
    def total(self):
        return len(self.new_schedules) + len(self.completed_series)


# Фикстура для тестовой БД. Файловая БД, чтобы параллельные сессии видели одни данные
@pytest.fixture
async def session_maker(tmp_path):
    """Создать тестовую БД и фабрику сессий"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_maker(engine)

    await engine.dispose()


@pytest.fixture
def questionnaire_store(session_maker):
    return SqlQuestionnaireStore(session_maker)


@pytest.fixture
def schedule_store(session_maker):
    return SqlScheduledQuestionnaireStore(session_maker)


@pytest.fixture
def result_store(session_maker):
    return SqlQuestionnaireResultStore(session_maker)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def workflow(questionnaire_store, schedule_store, result_store, notifier):
    workflow = CompletionWorkflow(questionnaire_store, schedule_store, result_store, notifier)
    yield workflow
    # Уведомления уходят фоновыми задачами
    await workflow.drain()


@pytest.fixture
def seed(session_maker):
    """Заполнить БД участником, анкетой и ожидающим расписанием"""
    async def _seed(max_attempts=3, hours_between_attempts=24, scheduled_at=datetime(2023, 12, 4, 0, 0, 0)):
        async with session_maker() as session:
            session.add_all([
                Participant(id=PARTICIPANT_ID, name="Test Participant"),
                Questionnaire(
                    id=QUESTIONNAIRE_ID,
                    study_id=STUDY_ID,
                    name="Mood check",
                    questions='[{"question": "How are you?"}]',
                    max_attempts=max_attempts,
                    hours_between_attempts=hours_between_attempts,
                ),
                ScheduledQuestionnaire(
                    id=SCHEDULE_ID,
                    questionnaire_id=QUESTIONNAIRE_ID,
                    participant_id=PARTICIPANT_ID,
                    scheduled_at=scheduled_at,
                    status=ScheduleStatus.PENDING,
                ),
            ])
            await session.commit()
    return _seed
