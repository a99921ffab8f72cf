"""
API Schemas package.

Pydantic models for request/response validation.
"""

from .jobs import (
    EnqueueRequest,
    SimultaneousEnqueueRequest,
    JobResponse,
    SimultaneousEnqueueResponse,
    JobListResponse,
    JobStatusResponse,
)

__all__ = [
    "EnqueueRequest",
    "SimultaneousEnqueueRequest",
    "JobResponse",
    "SimultaneousEnqueueResponse",
    "JobListResponse",
    "JobStatusResponse",
]
