"""
Job Service - the job processing engine.

Owns:
- Job creation and deduplication by task name (enqueue)
- The background attempt loop with bounded retries
- Every status and attempt mutation of a Job
- Status aggregation for reporting

Locking:
    A single lock per service instance guards the whole enqueue
    scan-then-create sequence, each mutation made by an attempt loop,
    and the failure counter of the unstable-job handler. It is never
    held across the backoff sleep or a task execution.

Usage:
    service = JobService.create()
    job_id = service.enqueue("build")
    job = service.get_job_by_id(job_id)
"""

import logging
import threading
import time
from typing import Callable, Iterable, Optional

from .entities import (
    Job,
    JobStatus,
    JobStatusSummary,
    MAX_ATTEMPTS,
)
from .errors import StoreError, TaskExecutionError
from .handlers import (
    DEFAULT_PROCESSING_DELAY_SECONDS,
    TaskHandlerRegistry,
    create_default_registry,
)
from .spawner import TaskSpawner, ThreadSpawner, WorkerPoolSpawner
from .store import InMemoryJobStore, JobStore


logger = logging.getLogger(__name__)


# Constant wait between failed attempts of one job, in seconds
RETRY_DELAY_SECONDS = 1.0


class JobService:
    """
    Job processing engine.

    Caller-facing operations (enqueue, get_*) run synchronously. Each
    enqueue that creates a job also hands one attempt loop to the
    spawner; failures inside that loop are never raised to the caller
    and can only be observed through the job's status afterwards.
    """

    def __init__(
        self,
        store: JobStore,
        spawner: Optional[TaskSpawner] = None,
        registry: Optional[TaskHandlerRegistry] = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
        processing_delay: float = DEFAULT_PROCESSING_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize JobService.

        Args:
            store: Job store (system of record)
            spawner: Runs attempt loops in the background (default: thread per job)
            registry: Task handlers by task name (default: simulated + unstable-job)
            retry_delay: Seconds to wait between failed attempts
            processing_delay: Simulated work time of the default handler
            sleep: Sleep function (injectable for testing)
        """
        self.store = store
        self.spawner = spawner or ThreadSpawner()
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._lock = threading.Lock()

        if registry is None:
            registry = create_default_registry(
                lock=self._lock,
                processing_delay=processing_delay,
                sleep=sleep,
            )
        self.registry = registry
        logger.debug(
            f"Task handlers: {registry.task_names} "
            f"(default: {type(registry.default).__name__})"
        )

    @classmethod
    def create(
        cls,
        store: Optional[JobStore] = None,
        max_workers: int = 0,
        retry_delay: float = RETRY_DELAY_SECONDS,
        processing_delay: float = DEFAULT_PROCESSING_DELAY_SECONDS,
    ) -> "JobService":
        """
        Create a JobService with its collaborators wired together.

        Args:
            store: Job store (default: in-memory)
            max_workers: 0 for a thread per job, N > 0 for a bounded pool
            retry_delay: Seconds to wait between failed attempts
            processing_delay: Simulated work time of the default handler

        Returns:
            Configured JobService
        """
        spawner: TaskSpawner
        if max_workers > 0:
            spawner = WorkerPoolSpawner(max_workers=max_workers)
        else:
            spawner = ThreadSpawner()

        return cls(
            store=store if store is not None else InMemoryJobStore(),
            spawner=spawner,
            retry_delay=retry_delay,
            processing_delay=processing_delay,
        )

    # =========================================================================
    # Enqueue
    # =========================================================================

    def enqueue(self, task_name: str) -> str:
        """
        Submit a task by name and return the ID of the job tracking it.

        If a pending or running job for the same task already exists,
        its ID is returned and nothing new is created or started.

        Args:
            task_name: Task name (unit-of-work descriptor)

        Returns:
            Job ID (existing or newly created)

        Raises:
            ValueError: If task_name is empty
            StoreError: If the store scan or save failed; no job is
                created and nothing is started in that case
            Exception: Whatever the spawner raised; the new job is then
                stored as failed so later enqueues are not deduplicated
                onto it
        """
        if not task_name or not task_name.strip():
            raise ValueError("Task name cannot be empty.")

        with self._lock:
            for existing in self.store.find_all():
                if existing.task == task_name and existing.is_active():
                    logger.info(
                        f"Job deduplicated: task='{task_name}' -> {existing.job_id} "
                        f"(status={existing.status.value})"
                    )
                    return existing.job_id

            job = Job.create(task_name)
            self.store.save(job)

            try:
                self.spawner.spawn(job.job_id, lambda: self._process_job(job))
            except Exception as e:
                # Nothing will ever run this job; close it so the task name is free again
                job.last_error = f"Failed to start job: {e}"
                job.transition_to(JobStatus.FAILED)
                try:
                    self.store.save(job)
                except StoreError as save_error:
                    logger.error(f"Failed to mark unstarted job {job.job_id} as failed: {save_error}")
                logger.error(f"Job {job.job_id} could not be started (task='{task_name}'): {e}")
                raise

        logger.info(f"Job enqueued: {job.job_id} (task='{task_name}')")
        return job.job_id

    def simultaneous_enqueue(self, task_names: Iterable[str]) -> list[str]:
        """
        Enqueue several tasks back to back.

        Each name goes through enqueue() in order, so names that are
        already in flight collapse onto their existing job.

        Returns:
            Job IDs in the order of task_names
        """
        return [self.enqueue(name) for name in task_names]

    # =========================================================================
    # Attempt loop
    # =========================================================================

    def _process_job(self, job: Job) -> None:
        """
        Drive a job from pending to completed or failed.

        Runs on a spawner thread. Attempts are strictly sequential and
        nothing can abort the loop once it has started.
        """
        self._update_job(job, lambda j: j.transition_to(JobStatus.RUNNING))

        while True:
            self._update_job(job, lambda j: j.record_attempt())

            try:
                self._execute_task(job)
            except TaskExecutionError as e:
                logger.warning(
                    f"Job {job.job_id} failed attempt {job.attempts}/{MAX_ATTEMPTS}: {e.message}"
                )

                if job.attempts >= MAX_ATTEMPTS:
                    self._update_job(job, lambda j: _fail(j, e.message))
                    logger.error(
                        f"Job {job.job_id} failed after {job.attempts} attempts"
                    )
                    return

                self._update_job(job, lambda j: _note_error(j, e.message))
                self._sleep(self.retry_delay)
                continue

            self._update_job(job, lambda j: j.transition_to(JobStatus.COMPLETED))
            logger.info(
                f"Job {job.job_id} completed (task='{job.task}', attempts={job.attempts})"
            )
            return

    def _execute_task(self, job: Job) -> None:
        """
        Run one attempt through the handler registered for the task.

        Raises:
            TaskExecutionError: For any failure of the attempt, including
                unexpected exceptions from the handler
        """
        handler = self.registry.get(job.task)
        try:
            handler.execute(job)
        except TaskExecutionError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error executing job {job.job_id}")
            raise TaskExecutionError(job.job_id, job.task, f"Execution error: {e}") from e

    def _update_job(self, job: Job, mutate: Callable[[Job], object]) -> None:
        """
        Apply a mutation to the working job and persist it, under the lock.

        A store failure is logged and the loop goes on with the
        in-memory job, so the next successful save catches the store up.
        """
        with self._lock:
            mutate(job)
            try:
                self.store.save(job)
            except StoreError as e:
                logger.error(
                    f"Failed to update job {job.job_id} "
                    f"(status={job.status.value}, attempts={job.attempts}): {e}"
                )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_all_jobs(self) -> list[Job]:
        """Get snapshots of all jobs currently in the store."""
        return self.store.find_all()

    def get_job_by_id(self, job_id: str) -> Job:
        """
        Get a job snapshot by ID.

        Raises:
            JobNotFoundError: If no job has this ID
        """
        return self.store.find_by_id(job_id)

    def get_all_job_status(self) -> JobStatusSummary:
        """
        Count jobs per status.

        Raises:
            StoreError: If the store read failed
        """
        return JobStatusSummary.from_jobs(self.store.find_all())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every spawned attempt loop has finished.

        Returns:
            True if idle, False if the timeout expired first
        """
        return self.spawner.join(timeout)

    def shutdown(self, wait: bool = True) -> None:
        """
        Release background resources.

        Running attempt loops are not cancelled; with wait=True this
        blocks until they reach a terminal status.
        """
        logger.info(f"Shutting down job service (wait={wait})")
        self.spawner.shutdown(wait=wait)

    @property
    def active_count(self) -> int:
        """Number of attempt loops still running or waiting for a worker."""
        return self.spawner.active_count


def _fail(job: Job, error: str) -> None:
    job.last_error = error
    job.transition_to(JobStatus.FAILED)


def _note_error(job: Job, error: str) -> None:
    job.last_error = error
