"""
Runtime settings from environment variables.

Environment Variables:
- LOG_LEVEL: Logging level (default: INFO)
- JOBQUEUE_LOG_TO_FILE: Also write daily log files (default: false)
- JOBQUEUE_LOG_DIR: Directory for log files (default: logs)
- JOBQUEUE_STORE: Job store backend, "memory" or "sqlite" (default: memory)
- JOBQUEUE_DB_PATH: SQLite file for the sqlite store (default: data/jobs.db)
- JOBQUEUE_MAX_WORKERS: 0 = thread per job, N > 0 = bounded pool (default: 0)
- JOBQUEUE_HOST / JOBQUEUE_PORT: API bind address (default: 127.0.0.1:8000)

Retry count and backoff are fixed by the engine and not configurable.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from src.engine import InMemoryJobStore, JobStore, SqliteJobStore

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "sqlite")


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    val = os.getenv(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    elif val in ("false", "0", "no", "off"):
        return False
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    val = os.getenv(key)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"[Settings] Invalid integer for {key}: {val}, using default: {default}")
    return default


@dataclass
class Settings:
    """Resolved runtime settings."""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    store_backend: str = "memory"
    db_path: str = "data/jobs.db"
    max_workers: int = 0
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown job store '{self.store_backend}'. "
                f"Expected one of: {', '.join(STORE_BACKENDS)}"
            )
        if self.max_workers < 0:
            raise ValueError(f"max_workers must be >= 0, got {self.max_workers}")


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Raises:
        ValueError: If JOBQUEUE_STORE or JOBQUEUE_MAX_WORKERS is invalid
    """
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_to_file=_get_env_bool("JOBQUEUE_LOG_TO_FILE", False),
        log_dir=os.getenv("JOBQUEUE_LOG_DIR", "logs"),
        store_backend=os.getenv("JOBQUEUE_STORE", "memory").lower(),
        db_path=os.getenv("JOBQUEUE_DB_PATH", "data/jobs.db"),
        max_workers=_get_env_int("JOBQUEUE_MAX_WORKERS", 0),
        host=os.getenv("JOBQUEUE_HOST", "127.0.0.1"),
        port=_get_env_int("JOBQUEUE_PORT", 8000),
    )


def create_store(settings: Settings) -> JobStore:
    """Build the job store selected by settings."""
    if settings.store_backend == "sqlite":
        logger.info(f"[Settings] Using SQLite job store at {Path(settings.db_path).resolve()}")
        return SqliteJobStore(settings.db_path)

    logger.info("[Settings] Using in-memory job store")
    return InMemoryJobStore()
