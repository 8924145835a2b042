from .notifier import Notifier, TelegramNotifier
from .store import (
    SqlParticipantStore,
    SqlQuestionnaireResultStore,
    SqlQuestionnaireStore,
    SqlScheduledQuestionnaireStore,
)
from .workflow import CompletionOutcome, CompletionWorkflow, OutcomeKind

__all__ = [
    "Notifier",
    "TelegramNotifier",
    "SqlParticipantStore",
    "SqlQuestionnaireResultStore",
    "SqlQuestionnaireStore",
    "SqlScheduledQuestionnaireStore",
    "CompletionOutcome",
    "CompletionWorkflow",
    "OutcomeKind",
]
