"""
Job service state management for API integration.

Provides singleton access to the JobService instance.
Initialized during FastAPI lifespan.

Usage:
    from ._service_state import get_job_service, init_job_service

    # In lifespan:
    init_job_service(store=store, max_workers=0)

    # In routers:
    service = get_job_service()
"""

import logging
from typing import Optional

from src.engine import JobService, JobStore
from src.engine.handlers import DEFAULT_PROCESSING_DELAY_SECONDS
from src.engine.service import RETRY_DELAY_SECONDS


logger = logging.getLogger(__name__)

# Global job service instance
_job_service: Optional[JobService] = None


def init_job_service(
    store: Optional[JobStore] = None,
    max_workers: int = 0,
    retry_delay: float = RETRY_DELAY_SECONDS,
    processing_delay: float = DEFAULT_PROCESSING_DELAY_SECONDS,
) -> JobService:
    """
    Initialize the job service singleton.

    Called during FastAPI lifespan startup. Returns the existing
    instance if one is already initialized.

    Args:
        store: Job store (default: in-memory)
        max_workers: 0 for a thread per job, N > 0 for a bounded pool
        retry_delay: Seconds between failed attempts
        processing_delay: Simulated work time of generic tasks

    Returns:
        Initialized JobService
    """
    global _job_service

    if _job_service is not None:
        return _job_service

    _job_service = JobService.create(
        store=store,
        max_workers=max_workers,
        retry_delay=retry_delay,
        processing_delay=processing_delay,
    )
    logger.info(f"Job service initialized (max_workers={max_workers or 'unbounded'})")

    return _job_service


def set_job_service(service: Optional[JobService]) -> None:
    """Replace the singleton (used by tests to inject a prepared service)."""
    global _job_service
    _job_service = service


def get_job_service() -> JobService:
    """
    Get the job service singleton.

    Raises:
        RuntimeError: If job service not initialized
    """
    if _job_service is None:
        raise RuntimeError(
            "Job service not initialized. "
            "Ensure init_job_service() is called during startup."
        )

    return _job_service


def shutdown_job_service(wait: bool = True) -> None:
    """
    Shutdown the job service.

    Called during FastAPI lifespan shutdown. Running attempt loops are
    not cancelled; with wait=True shutdown blocks until they finish.
    """
    global _job_service

    if _job_service is not None:
        _job_service.shutdown(wait=wait)
        _job_service = None
