"""
Task handlers for the job engine.

A handler runs one execution attempt for a job. Handlers are looked up
by task name in a TaskHandlerRegistry; names without a registered
handler fall back to the registry's default handler.

What a handler MUST NOT do:
- Modify the Job entity (the engine owns status and attempts)
- Decide retry policy
- Touch the job store
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .entities import Job
from .errors import TaskExecutionError


logger = logging.getLogger(__name__)


# Task name with hard-coded fail-twice-then-succeed behavior
UNSTABLE_TASK_NAME = "unstable-job"

# Failures simulated per job before the sentinel task succeeds
UNSTABLE_FAILURES_BEFORE_SUCCESS = 2

# Simulated processing time for generic tasks, in seconds
DEFAULT_PROCESSING_DELAY_SECONDS = 0.5


class TaskHandler(ABC):
    """Abstract base class for task handlers."""

    @abstractmethod
    def execute(self, job: Job) -> None:
        """
        Run one attempt of the job's task.

        Args:
            job: Snapshot of the job being attempted

        Raises:
            TaskExecutionError: If the attempt failed
        """
        ...


class SimulatedTaskHandler(TaskHandler):
    """
    Default handler: waits a fixed processing delay, then succeeds.

    Stands in for real work for every task name without its own handler.
    """

    def __init__(
        self,
        processing_delay: float = DEFAULT_PROCESSING_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.processing_delay = processing_delay
        self._sleep = sleep

    def execute(self, job: Job) -> None:
        logger.debug(f"Simulating task '{job.task}' for job {job.job_id}")
        self._sleep(self.processing_delay)


class UnstableTaskHandler(TaskHandler):
    """
    Sentinel handler: fails the first two attempts of each job, then succeeds.

    State is kept per job ID, so a job enqueued after a previous one
    reached a terminal status gets its own two failures.
    Entries are never removed.
    """

    def __init__(
        self,
        lock: Optional[threading.Lock] = None,
        failures_before_success: int = UNSTABLE_FAILURES_BEFORE_SUCCESS,
    ):
        """
        Args:
            lock: Lock guarding the failure counter. The engine passes its
                own lock here; a private lock is used otherwise.
            failures_before_success: Attempts that fail before one succeeds
        """
        self._lock = lock or threading.Lock()
        self.failures_before_success = failures_before_success
        self._failures: dict[str, int] = {}

    def execute(self, job: Job) -> None:
        with self._lock:
            failures = self._failures.get(job.job_id, 0)
            if failures < self.failures_before_success:
                self._failures[job.job_id] = failures + 1
                raise TaskExecutionError(
                    job.job_id,
                    job.task,
                    f"simulated failure for {job.task}",
                )


class TaskHandlerRegistry:
    """
    Maps task names to handlers.

    Usage:
        registry = TaskHandlerRegistry(default=SimulatedTaskHandler())
        registry.register("unstable-job", UnstableTaskHandler())
        registry.get("build").execute(job)
    """

    def __init__(self, default: TaskHandler):
        self._default = default
        self._handlers: dict[str, TaskHandler] = {}

    def register(self, task_name: str, handler: TaskHandler) -> None:
        """Register (or replace) the handler for a task name."""
        if not task_name:
            raise ValueError("task_name must not be empty")
        self._handlers[task_name] = handler

    def get(self, task_name: str) -> TaskHandler:
        """Get the handler for a task name, or the default handler."""
        return self._handlers.get(task_name, self._default)

    @property
    def default(self) -> TaskHandler:
        return self._default

    @property
    def task_names(self) -> list[str]:
        return sorted(self._handlers)


def create_default_registry(
    lock: Optional[threading.Lock] = None,
    processing_delay: float = DEFAULT_PROCESSING_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> TaskHandlerRegistry:
    """
    Build the registry used by the engine out of the box.

    - "unstable-job" -> UnstableTaskHandler
    - anything else -> SimulatedTaskHandler
    """
    registry = TaskHandlerRegistry(
        default=SimulatedTaskHandler(processing_delay=processing_delay, sleep=sleep)
    )
    registry.register(UNSTABLE_TASK_NAME, UnstableTaskHandler(lock=lock))
    return registry
