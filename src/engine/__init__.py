"""
Job Engine Core Module.

- entities: Job, JobStatus, JobStatusSummary
- store / sqlite_store: JobStore interface and implementations
- handlers: task handlers and the registry keyed by task name
- spawner: background execution of attempt loops
- service: JobService (enqueue, attempt loop, queries)
"""

from .entities import (
    MAX_ATTEMPTS,
    Job,
    JobStatus,
    JobStatusSummary,
)
from .errors import (
    JobQueueError,
    StoreError,
    JobNotFoundError,
    TaskExecutionError,
    InvalidOperationError,
)
from .store import JobStore, InMemoryJobStore
from .sqlite_store import SqliteJobStore
from .handlers import (
    UNSTABLE_TASK_NAME,
    TaskHandler,
    SimulatedTaskHandler,
    UnstableTaskHandler,
    TaskHandlerRegistry,
    create_default_registry,
)
from .spawner import TaskSpawner, ThreadSpawner, WorkerPoolSpawner
from .service import JobService, RETRY_DELAY_SECONDS

__all__ = [
    # Entities
    "MAX_ATTEMPTS",
    "Job",
    "JobStatus",
    "JobStatusSummary",
    # Errors
    "JobQueueError",
    "StoreError",
    "JobNotFoundError",
    "TaskExecutionError",
    "InvalidOperationError",
    # Stores
    "JobStore",
    "InMemoryJobStore",
    "SqliteJobStore",
    # Handlers
    "UNSTABLE_TASK_NAME",
    "TaskHandler",
    "SimulatedTaskHandler",
    "UnstableTaskHandler",
    "TaskHandlerRegistry",
    "create_default_registry",
    # Spawners
    "TaskSpawner",
    "ThreadSpawner",
    "WorkerPoolSpawner",
    # Service
    "JobService",
    "RETRY_DELAY_SECONDS",
]
