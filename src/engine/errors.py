"""
Job engine exceptions.

- StoreError: persistence failures, surfaced to the caller of the engine call
- JobNotFoundError: no job with the requested ID
- TaskExecutionError: one failed attempt, contained in the attempt loop
- InvalidOperationError: illegal status transition or attempt overflow
"""


class JobQueueError(Exception):
    """Base exception for all job engine errors."""
    pass


class StoreError(JobQueueError):
    """
    Raised when the job store cannot complete an operation.

    Never retried by the engine for reads; enqueue aborts cleanly on it.
    """
    pass


class JobNotFoundError(JobQueueError):
    """Raised when a requested job does not exist."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class TaskExecutionError(JobQueueError):
    """
    Raised by a task handler when an attempt fails.

    Only logged and fed into the retry decision; never reaches
    whoever called enqueue.
    """

    def __init__(self, job_id: str, task: str, message: str):
        self.job_id = job_id
        self.task = task
        self.message = message
        super().__init__(f"Task '{task}' failed for job {job_id}: {message}")


class InvalidOperationError(JobQueueError):
    """
    Raised when an operation violates job invariants.

    Examples:
    - Moving a job out of completed or failed
    - Recording a fourth attempt
    """
    pass
