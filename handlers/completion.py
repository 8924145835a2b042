"""Хендлер входящего события завершения анкеты"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Union

from models import decode_event
from services.workflow import CompletionWorkflow, OutcomeKind
from utils.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    status_code: int
    body: str

    @property
    def success(self) -> bool:
        return self.status_code == 200


OK = Response(200, "Success")
BAD_REQUEST = Response(400, "Bad request")
CONFLICT = Response(409, "Conflict")
INTERNAL_ERROR = Response(500, "Internal server error")

OUTCOME_RESPONSES = {
    OutcomeKind.COMPLETED: OK,
    OutcomeKind.CONFLICT: CONFLICT,
    OutcomeKind.LOOKUP_FAILED: INTERNAL_ERROR,
    OutcomeKind.WRITE_FAILED: INTERNAL_ERROR,
}


async def handle_event(workflow: CompletionWorkflow, raw: Union[str, bytes, Dict[str, Any]]) -> Response:
    """Разобрать событие, запустить обработку и вернуть ответ со статусом"""
    try:
        event = decode_event(raw)
    except DecodeError as exc:
        logger.error("Некорректное событие: %s", exc)
        return BAD_REQUEST

    outcome = await workflow.handle_completion(event)
    return OUTCOME_RESPONSES[outcome.kind]
