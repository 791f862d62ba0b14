from datetime import datetime
from typing import List
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings

from src.core.env_manager import EnvManager


class Settings(BaseSettings):
    ASYNC_DATABASE_URL: str = EnvManager.get_env_variable(
        "ASYNC_DATABASE_URL", "sqlite+aiosqlite:///database.db"
    )

    PROJECT_NAME: str = EnvManager.get_env_variable("PROJECT_NAME", "Blog Posts API")
    PROJECT_INFO: str = EnvManager.get_env_variable(
        "PROJECT_INFO", "Blog post resource: create, edit, publish and notify"
    )
    PROJECT_VERSION: str = EnvManager.get_env_variable("PROJECT_VERSION", "1.0.0")
    TIME_ZONE: str = EnvManager.get_env_variable("TIME_ZONE", "UTC")
    LOG_LEVEL: str = EnvManager.get_env_variable("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = ["*"]

    # Window used by the recent-posts digest
    NOTIFY_RECENT_HOURS: int = 24
    MAIL_SENDER: str = EnvManager.get_env_variable(
        "MAIL_SENDER", "no-reply@blog.local"
    )

    def get_now(self):
        """Get the current time in the configured time zone."""
        tz = ZoneInfo(self.TIME_ZONE)
        return datetime.now(tz)


settings = Settings()
