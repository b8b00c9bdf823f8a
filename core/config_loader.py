import yaml
import os
from datetime import time
from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    url: str


class ScheduleConfig(BaseModel):
    """
    Configuration for the nightly score job.
    """
    enabled: bool = True
    # Wall-clock time of the daily run, server local time ("HH:MM")
    run_at: str = "01:00"
    # Deadline for a single course; a slow course fails alone
    course_timeout_seconds: float = 300.0
    # Optional cross-process lock file; None = in-process guard only
    lock_file: Optional[str] = None

    @field_validator('run_at')
    @classmethod
    def _validate_run_at(cls, value: str) -> str:
        try:
            hours, minutes = value.split(':')
            time(int(hours), int(minutes))
        except ValueError:
            raise ValueError(f"run_at must be HH:MM, got {value!r}")
        return value

    @property
    def run_at_time(self) -> time:
        hours, minutes = self.run_at.split(':')
        return time(int(hours), int(minutes))


class ShuffleConfig(BaseModel):
    """Mentor shuffle policy selection."""
    policy: Literal["random", "rotate"] = "random"
    seed: Optional[int] = None  # fixed seed makes the random policy reproducible


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class AppConfig(BaseModel):
    database: DatabaseConfig
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    shuffle: ShuffleConfig = Field(default_factory=ShuffleConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try absolute or adjusted path
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for the daily run time
    env_run_at = os.environ.get("SCORE_JOB_RUN_AT")
    if env_run_at:
        if not data.get('schedule'):
            data['schedule'] = {}
        data['schedule']['run_at'] = env_run_at

    env_lock_file = os.environ.get("SCORE_JOB_LOCK_FILE")
    if env_lock_file:
        if not data.get('schedule'):
            data['schedule'] = {}
        data['schedule']['lock_file'] = env_lock_file

    return AppConfig(**data)
