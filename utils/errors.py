"""Исключения сервиса перепланирования"""


class ReschedulerError(Exception):
    """Базовая ошибка сервиса"""


class NotFound(ReschedulerError):
    """Запись не найдена по ключу поиска"""


class PersistenceError(ReschedulerError):
    """Ошибка чтения или записи в БД"""


class ScheduleConflict(PersistenceError):
    """Расписание уже не находится в статусе pending"""

    def __init__(self, schedule_id: str):
        super().__init__(f"scheduled questionnaire {schedule_id} is not pending")
        self.schedule_id = schedule_id


class DecodeError(ReschedulerError):
    """Некорректное входящее событие"""


class ConfigError(ReschedulerError):
    """Некорректная конфигурация"""
