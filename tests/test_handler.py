"""Тесты хендлера входящего события"""
import json

import pytest
from sqlalchemy import text

from handlers import handle_event
from services import CompletionWorkflow
from tests.conftest import PARTICIPANT_ID, QUESTIONNAIRE_ID, STUDY_ID
from tests.test_workflow import FailingResultStore, StaleScheduleStore


def event_json(**overrides):
    data = {
        "id": "random",
        "user_id": PARTICIPANT_ID,
        "study_id": STUDY_ID,
        "questionnaire_id": QUESTIONNAIRE_ID,
        "completed_at": "2023-12-04 02:11:00",
        "remaining_completions": 2,
    }
    data.update(overrides)
    return json.dumps(data)


@pytest.mark.asyncio
async def test_success_response(workflow, seed):
    await seed()

    response = await handle_event(workflow, event_json())
    await workflow.drain()

    assert response.status_code == 200
    assert response.body == "Success"
    assert response.success


@pytest.mark.asyncio
async def test_lookup_failure_response(workflow):
    """Тест: пустая БД даёт 500"""
    response = await handle_event(workflow, event_json())

    assert response.status_code == 500
    assert response.body == "Internal server error"


@pytest.mark.asyncio
async def test_bad_event_response(workflow, notifier):
    """Тест: некорректный JSON даёт 400 без обработки"""
    response = await handle_event(workflow, "{broken")

    assert response.status_code == 400
    assert notifier.total == 0


@pytest.mark.asyncio
async def test_repeated_event_response(workflow, seed):
    """Тест: повторное событие после закрытия расписания не находит его"""
    await seed(max_attempts=3)

    first = await handle_event(workflow, event_json(remaining_completions=0))
    second = await handle_event(workflow, event_json(remaining_completions=0))
    await workflow.drain()

    assert first.status_code == 200
    assert second.status_code == 500


@pytest.mark.asyncio
async def test_write_failure_response(seed, questionnaire_store, schedule_store, notifier):
    await seed()
    workflow = CompletionWorkflow(questionnaire_store, schedule_store, FailingResultStore(), notifier)

    response = await handle_event(workflow, event_json())
    await workflow.drain()

    assert response.status_code == 500


@pytest.mark.asyncio
async def test_conflict_response(seed, questionnaire_store, schedule_store, result_store, notifier):
    """Тест: расписание, закрытое параллельным событием, даёт 409"""
    await seed()
    stale = await schedule_store.get_pending_schedule(QUESTIONNAIRE_ID, PARTICIPANT_ID)
    await schedule_store.mark_schedule_completed(stale.id)
    workflow = CompletionWorkflow(
        questionnaire_store, StaleScheduleStore(schedule_store, stale), result_store, notifier
    )

    response = await handle_event(workflow, event_json())

    assert response.status_code == 409
    assert response.body == "Conflict"


@pytest.mark.asyncio
async def test_undecodable_stored_row_response(workflow, seed, session_maker):
    """Тест: расписание с временем не в формате YYYY-MM-DD HH:MM:SS даёт 500"""
    await seed()
    async with session_maker() as session:
        await session.execute(text(
            "UPDATE scheduled_questionnaires SET scheduled_at = '2023-12-04T00:00:00Z'"
        ))
        await session.commit()

    response = await handle_event(workflow, event_json())

    assert response.status_code == 500
    assert response.body == "Internal server error"
