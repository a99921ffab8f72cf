"""
Job API schemas.

Request/response models for the /jobs endpoints.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class EnqueueRequest(BaseModel):
    """Request to enqueue a task."""

    task: str = Field(
        ...,
        min_length=1,
        description="Task name. Requests for a task that is still pending or running return the existing job.",
        json_schema_extra={"examples": ["build", "unstable-job"]},
    )


class SimultaneousEnqueueRequest(BaseModel):
    """Request to enqueue three tasks back to back."""

    job1: str = Field(..., min_length=1, description="First task name")
    job2: str = Field(..., min_length=1, description="Second task name")
    job3: str = Field(..., min_length=1, description="Third task name")


class JobResponse(BaseModel):
    """Response representing a Job snapshot."""

    job_id: str = Field(..., description="Unique job identifier")
    task: str = Field(..., description="Task name")
    status: str = Field(..., description="Job status (pending/running/completed/failed)")
    attempts: int = Field(default=0, description="Execution attempts made so far")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")
    last_error: Optional[str] = Field(default=None, description="Error of the most recent failed attempt")


class SimultaneousEnqueueResponse(BaseModel):
    """Response from the simultaneous enqueue endpoint."""

    job1: JobResponse
    job2: JobResponse
    job3: JobResponse


class JobListResponse(BaseModel):
    """Response from job list endpoint."""

    jobs: List[JobResponse] = Field(default_factory=list)
    total: int = Field(..., description="Number of jobs returned")


class JobStatusResponse(BaseModel):
    """Job counts per status."""

    pending: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0
    total: int = 0
