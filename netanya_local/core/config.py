from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_ENV: Literal["dev", "prod"] = "dev"

    # FastAPI
    APP_NAME: str = "Netanya Local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # DB
    DATABASE_URL: str
    SQL_ECHO: bool = False

    # Локаль по умолчанию для сообщений об ошибках
    DEFAULT_LOCALE: Literal["he", "ru"] = "he"

    # Telegram-уведомления админам (необязательно)
    TELEGRAM_BOT_TOKEN: Optional[str] = None

    # сид супер-админа при старте (необязательно)
    SUPER_ADMIN_EMAIL: Optional[str] = None
    SUPER_ADMIN_NAME: str = "Admin"

    # куда складывать JSON-бэкапы
    BACKUP_DIR: str = "backups"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def async_database_url(self) -> str:
        url = self.DATABASE_URL
        # Railway/Render отдают postgres://, asyncpg нужен postgresql+asyncpg://
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    s = Settings()  # читает переменные из окружения
    if s.APP_ENV == "dev":
        s.DEBUG = True
    else:
        s.DEBUG = False
    return s
