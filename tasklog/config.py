import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from tasklog.level import Level
from tasklog.prefix import DEFAULT_PATTERN

ENV_PREFIX = "TASKLOG_"


class WriterSettings(BaseModel):
    """
    Settings of a LoggerThread.

    Attributes:
        name: Name of the writer thread
        level: Default threshold for loggers built by the writer
        pattern: Default prefix pattern (see SimplePrefixFormatter)
        encoding: Encoding used when the destination is a byte stream
        auto_flush: Flush the destination after every task
        queue_capacity: Maximum queued tasks; 0 means unbounded
        enqueue_timeout: Seconds a producer waits on a full queue before the
            non-blocking retry
        poll_interval: Seconds between stop-token checks of an idle writer
        shutdown_timeout: Default wait of shutdown(); 0 waits indefinitely
        start_banner: Write "<name> started at [...]" when the loop starts
        daemon: Run the writer as a daemon thread
    """
    name: str = "LoggerThread"
    level: Level = Level.INFO
    pattern: str = DEFAULT_PATTERN
    encoding: str = "utf-8"
    auto_flush: bool = True
    queue_capacity: int = Field(default=0, ge=0)
    enqueue_timeout: float = Field(default=1.0, ge=0)
    poll_interval: float = Field(default=0.05, gt=0)
    shutdown_timeout: float = Field(default=0, ge=0)
    start_banner: bool = False
    daemon: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value):
        return Level.parse(value)

    @staticmethod
    def from_env(env_file: Optional[str] = None, **overrides) -> 'WriterSettings':
        """
        Build settings from TASKLOG_* environment variables.

        A .env file is loaded first (without overriding variables already set).
        Keyword overrides that are not None win over the environment.

        Examples:
            TASKLOG_LEVEL=debug
            TASKLOG_PATTERN="[%l] [%t] [%d{%H:%M:%S}] %p"
            TASKLOG_QUEUE_CAPACITY=1000
        """
        load_dotenv(env_file)
        values: Dict[str, str] = {}
        for field in WriterSettings.model_fields:
            raw = os.environ.get(f"{ENV_PREFIX}{field.upper()}")
            if raw is not None:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return WriterSettings(**values)
