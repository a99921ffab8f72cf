"""
Job Engine Domain Entities.

- Job: single unit of work tracked from enqueue to a terminal status
- JobStatus: lifecycle values (pending -> running -> completed | failed)
- JobStatusSummary: per-status counts, derived on demand, never stored

Only the engine mutates a Job. Stores keep copies at rest and hand out
copies, so a Job returned to a caller is a snapshot.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
import uuid

from .errors import InvalidOperationError


# Maximum execution attempts per job
MAX_ATTEMPTS = 3


class JobStatus(str, Enum):
    """
    Job status values.

    - PENDING: Created, attempt loop not yet entered
    - RUNNING: Attempt loop is active
    - COMPLETED: An attempt succeeded (terminal)
    - FAILED: MAX_ATTEMPTS attempts failed, or the attempt loop could not
      be started (terminal)
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

# Allowed status transitions; terminal statuses have no outgoing edges
_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING, JobStatus.FAILED}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def generate_job_id() -> str:
    """Generate a new unique job identifier."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


@dataclass
class Job:
    """
    A tracked unit of work.

    Mutability rules:
    - job_id, task, created_at: Immutable
    - status: Moves only along _TRANSITIONS, never out of a terminal status
    - attempts: Incremented once per execution attempt, never above MAX_ATTEMPTS
    - updated_at, last_error: Refreshed by the engine on each mutation
    """

    job_id: str
    task: str
    status: JobStatus = JobStatus.PENDING
    attempts: int = 0
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    last_error: Optional[str] = None

    @classmethod
    def create(cls, task: str) -> "Job":
        """Create a new PENDING Job with a generated ID."""
        now = now_iso()
        return cls(
            job_id=generate_job_id(),
            task=task,
            status=JobStatus.PENDING,
            attempts=0,
            created_at=now,
            updated_at=now,
        )

    def is_terminal(self) -> bool:
        """Check if job has reached completed or failed."""
        return self.status in TERMINAL_STATUSES

    def is_active(self) -> bool:
        """Check if job is pending or running (the dedup window)."""
        return self.status in (JobStatus.PENDING, JobStatus.RUNNING)

    def transition_to(self, status: JobStatus) -> None:
        """
        Move the job to a new status.

        Raises:
            InvalidOperationError: If the transition is not allowed
        """
        allowed = _TRANSITIONS.get(self.status, frozenset())
        if status not in allowed:
            raise InvalidOperationError(
                f"Job {self.job_id}: cannot move from "
                f"'{_status_value(self.status)}' to '{_status_value(status)}'"
            )
        self.status = status
        self.updated_at = now_iso()

    def record_attempt(self) -> int:
        """
        Count a new execution attempt.

        Raises:
            InvalidOperationError: If the job is not running or the
                attempt bound would be exceeded
        """
        if self.status != JobStatus.RUNNING:
            raise InvalidOperationError(
                f"Job {self.job_id}: attempts can only be recorded while running"
            )
        if self.attempts >= MAX_ATTEMPTS:
            raise InvalidOperationError(
                f"Job {self.job_id}: attempt limit {MAX_ATTEMPTS} reached"
            )
        self.attempts += 1
        self.updated_at = now_iso()
        return self.attempts

    def to_dict(self) -> dict:
        """Convert job to a plain dictionary."""
        data = asdict(self)
        data["status"] = _status_value(self.status)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Job":
        """Create job from dictionary."""
        values = dict(data)
        values["status"] = parse_status(values.get("status"))
        return cls(**values)


def parse_status(value) -> Union[JobStatus, str]:
    """
    Convert a stored status value to JobStatus.

    Unknown values are returned unchanged so that readers can skip them.
    """
    if isinstance(value, JobStatus):
        return value
    try:
        return JobStatus(value)
    except ValueError:
        return value


def _status_value(status) -> str:
    return status.value if isinstance(status, JobStatus) else str(status)


@dataclass
class JobStatusSummary:
    """Snapshot of job counts per status."""

    pending: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.running + self.completed + self.failed

    @classmethod
    def from_jobs(cls, jobs) -> "JobStatusSummary":
        """Tally jobs by status. Unrecognized statuses are not counted."""
        summary = cls()
        for job in jobs:
            if job.status == JobStatus.PENDING:
                summary.pending += 1
            elif job.status == JobStatus.RUNNING:
                summary.running += 1
            elif job.status == JobStatus.COMPLETED:
                summary.completed += 1
            elif job.status == JobStatus.FAILED:
                summary.failed += 1
        return summary

    def to_dict(self) -> dict:
        data = asdict(self)
        data["total"] = self.total
        return data
