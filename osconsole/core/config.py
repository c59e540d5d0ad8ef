# osconsole/core/config.py
from typing import List, Union, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    # ==== Зовнішній REST API (джерело правди для OS і статусів) ====
    backend_url: str = "http://localhost:3000"
    backend_timeout_sec: float = 10.0

    # ==== Черга нотифікацій ====
    redis_url: str = "redis://redis:6379/0"
    notifications_queue: str = "notifications"

    # вебхук для подій зміни статусу (порожньо = вимкнено)
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None

    # ==== CORS ====
    # CORS_ORIGINS=http://localhost:9002,http://127.0.0.1:9002,...
    cors_origins: Union[str, List[str]] = [
        "http://localhost:9002",
        "http://127.0.0.1:9002",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ==== Дашборд ====
    # підпис для OS без аналітика
    unassigned_label: str = "unassigned"

    # ==== Логування / Оточення ====
    env: str = "dev"          # dev|staging|prod
    log_level: str = "INFO"   # DEBUG|INFO|WARNING|ERROR

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                try:
                    import json
                    parsed = json.loads(s)
                    return [str(i).strip() for i in parsed if str(i).strip()]
                except ValueError:
                    pass
            return [i.strip() for i in s.split(",") if i.strip()]
        return v

    @field_validator("backend_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


settings = Settings()
