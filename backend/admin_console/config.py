"""Application configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    app_name: str = "HaatBazar Admin Console"
    debug: bool = False
    log_level: str = "INFO"

    # Upstream marketplace API
    api_base_url: str = "http://localhost:3001/api"
    request_timeout: float = 30.0

    # Jobs live in two upstream collections; records carry the tag of the list they came from
    approved_job_collection: str = "jobs"
    pending_job_collection: str = "pendingjobs"

    # Dashboard feeds
    notification_window_hours: int = 24
    recent_users_limit: int = 3
    recent_jobs_limit: int = 2
    recent_activity_limit: int = 5

    # Session store
    session_backend: Literal["file", "redis"] = "file"
    session_dir: str = ".admin_console"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "admin_console:"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
