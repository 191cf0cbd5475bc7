"""
Maps service-layer exceptions to HTTP responses at the router boundary.
"""
import logging

from fastapi import HTTPException

from app.github_client import (
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubTimeoutError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    """
    Translate an exception raised while ``action`` into an HTTPException.

    GitHub errors keep their user-facing message; anything unexpected is
    logged with its traceback and reported as a generic 500.
    """
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, GitHubPermissionError):
        status = 403
    elif isinstance(exc, GitHubAuthenticationError):
        status = 401
    elif isinstance(exc, GitHubNotFoundError):
        status = 404
    elif isinstance(exc, GitHubTimeoutError):
        status = 504
    elif isinstance(exc, GitHubConnectionError):
        status = 503
    elif isinstance(exc, GitHubApiError):
        status = 502
    elif isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    else:
        logger.exception(f"Unexpected error while {action}")
        return HTTPException(status_code=500, detail=f"An unexpected error occurred while {action}")

    logger.error(f"GitHub error while {action}: {exc}")
    return HTTPException(status_code=status, detail=str(exc))
