"""Событие завершения анкеты и его разбор из JSON"""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Union

from utils.errors import DecodeError
from utils.timestamp import parse_timestamp

REQUIRED_FIELDS = ("id", "user_id", "study_id", "questionnaire_id", "completed_at", "remaining_completions")


@dataclass(frozen=True)
class CompletionEvent:
    """Участник завершил одну попытку анкеты; событие не сохраняется в БД"""
    id: str
    user_id: str
    study_id: str
    questionnaire_id: str
    completed_at: datetime
    remaining_completions: int


def decode_event(raw: Union[str, bytes, Dict[str, Any]]) -> CompletionEvent:
    """Разобрать событие из JSON-строки или словаря"""
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"event is not valid JSON: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, dict):
        raise DecodeError("event must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        raise DecodeError(f"event is missing fields: {', '.join(missing)}")

    for name in ("id", "user_id", "study_id", "questionnaire_id"):
        if not isinstance(data[name], str) or not data[name]:
            raise DecodeError(f"field {name!r} must be a non-empty string")

    try:
        completed_at = parse_timestamp(data["completed_at"])
    except ValueError as exc:
        raise DecodeError(f"field 'completed_at' must match YYYY-MM-DD HH:MM:SS: {exc}") from exc

    remaining = data["remaining_completions"]
    # bool является подклассом int, его не принимаем
    if isinstance(remaining, bool) or not isinstance(remaining, int):
        raise DecodeError("field 'remaining_completions' must be an integer")
    if remaining < 0:
        raise DecodeError("field 'remaining_completions' must not be negative")

    return CompletionEvent(
        id=data["id"],
        user_id=data["user_id"],
        study_id=data["study_id"],
        questionnaire_id=data["questionnaire_id"],
        completed_at=completed_at,
        remaining_completions=remaining,
    )
