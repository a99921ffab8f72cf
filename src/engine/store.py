"""
Job Store interface and in-memory implementation.

The engine depends only on JobStore:
- save(job): upsert by job_id
- find_by_id(job_id): JobNotFoundError if absent
- find_all(): every stored job in creation order

Stores do NOT contain business logic and do NOT validate transitions.
Each call is atomic on its own; nothing spans calls.
"""

import copy
import threading
from abc import ABC, abstractmethod

from .entities import Job
from .errors import JobNotFoundError


class JobStore(ABC):
    """Abstract keyed storage for Job records."""

    @abstractmethod
    def save(self, job: Job) -> None:
        """
        Insert or replace a job by its ID.

        Raises:
            StoreError: If the job could not be persisted
        """
        ...

    @abstractmethod
    def find_by_id(self, job_id: str) -> Job:
        """
        Get a job snapshot by ID.

        Raises:
            JobNotFoundError: If no job has this ID
            StoreError: If the read failed
        """
        ...

    @abstractmethod
    def find_all(self) -> list[Job]:
        """
        Get snapshots of all jobs (possibly empty).

        Raises:
            StoreError: If the read failed
        """
        ...

    def close(self) -> None:
        """Release store resources. Default: nothing to release."""
        pass


class InMemoryJobStore(JobStore):
    """
    Process-local job store.

    Jobs are copied on the way in and on the way out, so the engine's
    working object and the caller's snapshot never alias.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def save(self, job: Job) -> None:
        with self._lock:
            self._jobs[job.job_id] = copy.deepcopy(job)

    def find_by_id(self, job_id: str) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            return copy.deepcopy(job)

    def find_all(self) -> list[Job]:
        with self._lock:
            return [copy.deepcopy(job) for job in self._jobs.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
