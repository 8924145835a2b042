from .database import Base, init_db, create_engine, create_session_maker
from .participant import Participant
from .questionnaire import Questionnaire
from .schedule import ScheduledQuestionnaire, ScheduleStatus
from .result import QuestionnaireResult
from .event import CompletionEvent, decode_event

__all__ = [
    "Base",
    "init_db",
    "create_engine",
    "create_session_maker",
    "Participant",
    "Questionnaire",
    "ScheduledQuestionnaire",
    "ScheduleStatus",
    "QuestionnaireResult",
    "CompletionEvent",
    "decode_event",
]
