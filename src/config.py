"""Configuration settings for CronGuard."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application environment, matched against task environment allow-lists
    environment: str = "development"

    # Scheduler
    scheduler_timezone: Optional[str] = None  # None means the process default
    schedule_target: Optional[str] = None  # "module:function" that registers tasks

    # Worker loop (main.py work)
    worker_job_defaults: dict = {
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 30
    }

    # Overlap guard markers
    lock_dir: str = "storage/tmp"

    # Shell command dispatcher
    command_timeout: int = 300

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_prefix = "CRONGUARD_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
