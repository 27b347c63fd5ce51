# scheduler/app/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:8090/api"
    redis_url: str = "redis://localhost:6379/0"
    request_timeout: float = 10.0

    tick_interval_seconds: float = 1.0

    default_open_time: str = "08:00"
    default_close_time: str = "20:00"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_prefix="SCHEDULER_",
        extra="ignore",
    )

    @property
    def resolved_api_base_url(self) -> str:
        return self.api_base_url.rstrip("/")


settings = Settings()
