"""
Job Engine Test Fixtures.

Base fixtures:
  - Empty in-memory store
  - Manual spawner (attempt loops run only when the test says so)
  - Recorded sleeps instead of real waiting

Per-test fixtures:
  - Store with injectable failures
  - Handlers with a controlled outcome
  - Threaded service with a tiny time unit for end-to-end runs
"""

import threading
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest

from src.engine import (
    InMemoryJobStore,
    Job,
    JobService,
    StoreError,
    TaskExecutionError,
    TaskHandler,
    TaskSpawner,
)


# Time unit for threaded tests; keeps the 3-attempt path well under a second
FAST_DELAY = 0.01

# Upper bound for waiting on background threads
IDLE_TIMEOUT = 10.0


class ManualSpawner(TaskSpawner):
    """
    Spawner that queues work until run_all() is called.

    Lets a test observe a job in PENDING and then drive its
    attempt loop synchronously on the test thread.
    """

    def __init__(self):
        self.spawned: list[tuple[str, Callable[[], None]]] = []

    def spawn(self, name: str, target: Callable[[], None]) -> None:
        self.spawned.append((name, target))

    def run_all(self) -> None:
        """Run every queued target in spawn order."""
        while self.spawned:
            _, target = self.spawned.pop(0)
            target()

    def join(self, timeout: Optional[float] = None) -> bool:
        return not self.spawned

    @property
    def active_count(self) -> int:
        return len(self.spawned)


class SleepRecorder:
    """Stands in for time.sleep and records requested durations."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FailingStore(InMemoryJobStore):
    """In-memory store whose operations can be made to raise StoreError."""

    def __init__(self):
        super().__init__()
        self.fail_save = False
        self.fail_find_all = False
        self.fail_find_by_id = False

    def save(self, job: Job) -> None:
        if self.fail_save:
            raise StoreError("simulated save failure")
        super().save(job)

    def find_by_id(self, job_id: str) -> Job:
        if self.fail_find_by_id:
            raise StoreError("simulated read failure")
        return super().find_by_id(job_id)

    def find_all(self) -> list[Job]:
        if self.fail_find_all:
            raise StoreError("simulated scan failure")
        return super().find_all()


class RecordingHandler(TaskHandler):
    """Succeeds and records the attempt number it was called on."""

    def __init__(self):
        self.calls: list[tuple[str, int]] = []

    def execute(self, job: Job) -> None:
        self.calls.append((job.job_id, job.attempts))


class AlwaysFailHandler(TaskHandler):
    """Fails every attempt with TaskExecutionError."""

    def __init__(self, message: str = "boom"):
        self.message = message
        self.calls = 0

    def execute(self, job: Job) -> None:
        self.calls += 1
        raise TaskExecutionError(job.job_id, job.task, self.message)


class CrashingHandler(TaskHandler):
    """Raises an unexpected exception type on every attempt."""

    def execute(self, job: Job) -> None:
        raise RuntimeError("kaboom")


class BlockingHandler(TaskHandler):
    """Blocks inside execute() until release() is called."""

    def __init__(self):
        self.started = threading.Event()
        self._release = threading.Event()

    def execute(self, job: Job) -> None:
        self.started.set()
        self._release.wait(IDLE_TIMEOUT)

    def release(self) -> None:
        self._release.set()


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryJobStore:
    """Empty in-memory store."""
    return InMemoryJobStore()


@pytest.fixture
def failing_store() -> FailingStore:
    """Store with switchable failures (all off initially)."""
    return FailingStore()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> str:
    """Path for a SQLite database inside the test's temp directory."""
    return str(tmp_path / "jobs.db")


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def spawner() -> ManualSpawner:
    return ManualSpawner()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def service(store, spawner, sleeps) -> JobService:
    """
    JobService with manual spawning and recorded sleeps.

    Nothing runs in the background; call spawner.run_all().
    """
    return JobService(store=store, spawner=spawner, sleep=sleeps)


@pytest.fixture
def failing_service(failing_store, spawner, sleeps) -> JobService:
    """Like service, backed by a FailingStore."""
    return JobService(store=failing_store, spawner=spawner, sleep=sleeps)


@pytest.fixture
def threaded_service() -> Generator[JobService, None, None]:
    """Real thread-per-job JobService with a tiny time unit."""
    svc = JobService.create(retry_delay=FAST_DELAY, processing_delay=FAST_DELAY)
    yield svc
    svc.shutdown(wait=True)


@pytest.fixture
def pooled_service() -> Generator[JobService, None, None]:
    """JobService on a two-worker pool with a tiny time unit."""
    svc = JobService.create(
        max_workers=2,
        retry_delay=FAST_DELAY,
        processing_delay=FAST_DELAY,
    )
    yield svc
    svc.shutdown(wait=True)
