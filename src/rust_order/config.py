import os

from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    jobs: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level '{value}'. Supported: {list(_LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        values: dict[str, str] = {}
        jobs = os.getenv("RUST_ORDER_JOBS")
        if jobs:
            values["jobs"] = jobs
        log_level = os.getenv("RUST_ORDER_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level
        return cls.model_validate(values)
