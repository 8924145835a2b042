"""Конфигурация сервиса"""
import os
from dataclasses import dataclass
from typing import Optional, Union

from dotenv import load_dotenv
from sqlalchemy.engine import URL

from .errors import ConfigError

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///data.db"
DEFAULT_DB_PORT = 3306


@dataclass(frozen=True)
class Settings:
    """Настройки, загружаемые один раз при старте процесса"""
    database_url: str
    bot_token: str
    notify_chat_id: Union[int, str]
    log_level: str = "INFO"
    detach_background_tasks: bool = False


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _chat_id(value: str) -> Union[int, str]:
    # Числовой id чата или @username канала
    value = value.strip()
    if value.lstrip("-").isdigit():
        return int(value)
    return value


def build_database_url() -> str:
    """Собрать URL БД из DATABASE_URL или из параметров подключения DB_*"""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    host = os.getenv("DB_HOST")
    if not host:
        return DEFAULT_DATABASE_URL

    port = os.getenv("DB_PORT", str(DEFAULT_DB_PORT))
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"DB_PORT must be an integer, got {port!r}") from None

    url = URL.create(
        "mysql+aiomysql",
        username=os.getenv("DB_USER"),
        password=os.getenv("DB_PASSWORD"),
        host=host,
        port=port_number,
        database=os.getenv("DB_NAME"),
    )
    return url.render_as_string(hide_password=False)


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Загрузить настройки из .env файла и переменных окружения"""
    load_dotenv(env_file)

    bot_token = os.getenv("BOT_TOKEN")
    if not bot_token:
        raise ConfigError("BOT_TOKEN не установлен в .env файле")

    notify_chat_id = os.getenv("NOTIFY_CHAT_ID")
    if not notify_chat_id or not notify_chat_id.strip():
        raise ConfigError("NOTIFY_CHAT_ID не установлен в .env файле")

    return Settings(
        database_url=build_database_url(),
        bot_token=bot_token,
        notify_chat_id=_chat_id(notify_chat_id),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        detach_background_tasks=_env_flag("DETACH_BACKGROUND_TASKS"),
    )
