"""
X-API-Key guard for the /jobs routes.

Off unless API_AUTH_ENABLED is truthy ("true", "1", "yes", "on").
When on, every request must carry an X-API-Key equal to API_KEY;
an empty API_KEY locks the routes entirely.

Both variables are read at import, so tests reload this module (and
src.api.main, which decides at import whether to attach the guard).
"""

import logging
import os
import secrets
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from src.infra.settings import _get_env_bool


logger = logging.getLogger(__name__)

API_AUTH_ENABLED = _get_env_bool("API_AUTH_ENABLED", False)
API_KEY = os.getenv("API_KEY", "")

if API_AUTH_ENABLED and not API_KEY:
    logger.warning("API_AUTH_ENABLED is set but API_KEY is empty; all job routes will return 401")

api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,
    description="Job API key (only checked when API_AUTH_ENABLED=true)",
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "ApiKey"},
    )


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header),
) -> Optional[str]:
    """
    Router dependency checking the X-API-Key header.

    Returns:
        The accepted key, or None when authentication is off

    Raises:
        HTTPException: 401 when the key is missing or does not match
    """
    if not API_AUTH_ENABLED:
        return None

    if not api_key:
        raise _unauthorized("Missing API key. Provide X-API-Key header.")

    if not API_KEY or not secrets.compare_digest(api_key, API_KEY):
        raise _unauthorized("Invalid API key")

    return api_key
