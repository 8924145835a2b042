"""Формат времени YYYY-MM-DD HH:MM:SS, используемый в БД и в событиях"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_timestamp(value: str) -> datetime:
    """Разобрать строку времени, ValueError при неверном формате"""
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    return datetime.strptime(value, TIMESTAMP_FORMAT)


def format_timestamp(value: datetime) -> str:
    """Отформатировать время без микросекунд и часового пояса"""
    return value.strftime(TIMESTAMP_FORMAT)


class TimeStamp(TypeDecorator):
    """Колонка с datetime на стороне Python и строкой фиксированного формата в БД"""

    impl = String(19)
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            # Проверяем формат, чтобы в БД не попала строка в ISO-8601
            value = parse_timestamp(value)
        return format_timestamp(value)

    def process_result_value(self, value, dialect) -> Optional[datetime]:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        return parse_timestamp(value)
