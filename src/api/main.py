"""
FastAPI application entry point.

Serves the job engine: enqueue tasks, poll jobs, read status counts.
Optional API key authentication.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI

from src import __version__
from src.infra.settings import load_settings, create_store
from .routers import jobs
from ._service_state import init_job_service, shutdown_job_service
from .dependencies.auth import verify_api_key, API_AUTH_ENABLED


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown of resources:
    - Job store selected by JOBQUEUE_STORE
    - Job service with its spawner
    """
    # Startup
    settings = load_settings()
    store = create_store(settings)
    init_job_service(store=store, max_workers=settings.max_workers)
    logger.info(
        f"Job engine started (store={settings.store_backend}, "
        f"max_workers={settings.max_workers})"
    )

    yield

    # Shutdown - wait for in-flight attempt loops, then release the store
    shutdown_job_service(wait=True)
    store.close()
    logger.info("Job engine stopped")

# Tag metadata for Swagger UI
tags_metadata = [
    {
        "name": "jobs",
        "description": "Job execution - enqueue named tasks, poll their status, read per-status counts",
    },
]

app = FastAPI(
    title="Job Queue API",
    lifespan=lifespan,
    description="""
## Job Queue API

In-process job engine. Each enqueued task runs in the background with up to
three attempts, one second apart.

### Authentication
When `API_AUTH_ENABLED=true`, all endpoints except `/health` require
an `X-API-Key` header matching the `API_KEY` environment variable.

### Features
- **Enqueue**: Duplicate requests for an in-flight task return the existing job
- **Retries**: Failed attempts are retried up to three attempts in total
- **Status**: Count jobs per status

### Usage
```bash
# Start server
python main.py --port 8000

# Enqueue a task
curl -X POST http://localhost:8000/jobs \\
  -H "Content-Type: application/json" \\
  -d '{"task": "build"}'

# Enqueue the unstable task (fails twice, then completes)
curl -X POST http://localhost:8000/jobs/unstable
```
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

# Health check - NO authentication (operational endpoint)
@app.get("/health")
async def health_check():
    """Health check endpoint. Not authenticated."""
    return {"status": "ok", "version": __version__}


# Include routers WITH authentication dependency (when enabled)
auth_dependency = [Depends(verify_api_key)] if API_AUTH_ENABLED else []

app.include_router(
    jobs.router, prefix="/jobs", tags=["jobs"], dependencies=auth_dependency
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
