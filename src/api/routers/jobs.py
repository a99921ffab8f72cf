"""
Jobs router for the job engine API.

Endpoints:
- POST /jobs - Enqueue a task (deduplicated while in flight)
- POST /jobs/simultaneous - Enqueue three tasks back to back
- POST /jobs/unstable - Enqueue the fail-twice-then-succeed task
- GET /jobs - List all jobs
- GET /jobs/status - Job counts per status
- GET /jobs/{job_id} - Get a single job

The router only translates between HTTP and JobService calls.
Background failures never surface here; poll the job instead.
"""

from fastapi import APIRouter, HTTPException

from ..schemas.jobs import (
    EnqueueRequest,
    SimultaneousEnqueueRequest,
    JobResponse,
    SimultaneousEnqueueResponse,
    JobListResponse,
    JobStatusResponse,
)
from .._service_state import get_job_service

from src.engine import JobNotFoundError, UNSTABLE_TASK_NAME

router = APIRouter()


def _job_to_response(job) -> JobResponse:
    """Convert engine Job entity to API response."""
    return JobResponse(
        job_id=job.job_id,
        task=job.task,
        status=job.status.value if hasattr(job.status, "value") else job.status,
        attempts=job.attempts,
        created_at=job.created_at,
        updated_at=job.updated_at,
        last_error=job.last_error,
    )


def _enqueue_and_read(task: str) -> JobResponse:
    """Enqueue a task and return a snapshot of the resulting job."""
    service = get_job_service()

    try:
        job_id = service.enqueue(task)
        return _job_to_response(service.get_job_by_id(job_id))

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to enqueue job: {str(e)}"
        )


@router.post("", response_model=JobResponse, status_code=201)
async def enqueue_job(request: EnqueueRequest):
    """
    Enqueue a task by name.

    If a job for the same task is still pending or running, that job is
    returned and no new work starts. Processing happens in the background;
    the response shows the job as it is right after enqueue.
    """
    return _enqueue_and_read(request.task)


@router.post("/simultaneous", response_model=SimultaneousEnqueueResponse, status_code=201)
async def simultaneous_enqueue(request: SimultaneousEnqueueRequest):
    """
    Enqueue three tasks back to back.

    Repeated names collapse onto one job, so job1 == job2 when both
    name the same task.
    """
    service = get_job_service()

    try:
        ids = service.simultaneous_enqueue([request.job1, request.job2, request.job3])
        jobs = [_job_to_response(service.get_job_by_id(job_id)) for job_id in ids]

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to enqueue jobs: {str(e)}"
        )

    return SimultaneousEnqueueResponse(job1=jobs[0], job2=jobs[1], job3=jobs[2])


@router.post("/unstable", response_model=JobResponse, status_code=201)
async def simulate_unstable_job():
    """
    Enqueue the unstable task.

    It fails its first two attempts and succeeds on the third, ending
    completed with attempts == 3.
    """
    return _enqueue_and_read(UNSTABLE_TASK_NAME)


@router.get("", response_model=JobListResponse)
async def list_jobs():
    """List all jobs in creation order."""
    service = get_job_service()

    try:
        jobs = service.get_all_jobs()
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list jobs: {str(e)}"
        )

    return JobListResponse(
        jobs=[_job_to_response(job) for job in jobs],
        total=len(jobs),
    )


@router.get("/status", response_model=JobStatusResponse)
async def get_job_status():
    """Get the number of jobs in each status."""
    service = get_job_service()

    try:
        summary = service.get_all_job_status()
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get job status: {str(e)}"
        )

    return JobStatusResponse(**summary.to_dict())


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str):
    """Get a specific job by ID."""
    service = get_job_service()

    try:
        job = service.get_job_by_id(job_id)
    except JobNotFoundError:
        raise HTTPException(
            status_code=404,
            detail=f"Job not found: {job_id}"
        )
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get job: {str(e)}"
        )

    return _job_to_response(job)
