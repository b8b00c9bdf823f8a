#!/usr/bin/env python3
"""
Exception handlers for the admin API.

Engine exceptions (core.exceptions) are raised straight out of the routers
and turned into JSON error responses here:

    {"success": false, "error": "<message>", "type": "<exception class>"}
"""

import logging
from typing import Any, Dict, Tuple, Type

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import (
    CourseRankError,
    CourseNotFoundError,
    StageNotFoundError,
    CourseTaskNotFoundError,
    NoActiveMentorsError,
    InvalidMentorError,
    JobAlreadyRunningError,
)

logger = logging.getLogger(__name__)

# First match wins; anything else is a 500
STATUS_BY_ERROR: Tuple[Tuple[Type[CourseRankError], int], ...] = (
    (CourseNotFoundError, 404),
    (StageNotFoundError, 404),
    (CourseTaskNotFoundError, 404),
    (NoActiveMentorsError, 400),
    (InvalidMentorError, 400),
    (JobAlreadyRunningError, 409),
)


def _error_response(status_code: int, error: Any, error_type: str) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "type": error_type
    }
    return JSONResponse(status_code=status_code, content=content)


def status_for(exc: CourseRankError) -> int:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def course_rank_exception_handler(
    request: Request,
    exc: CourseRankError
) -> JSONResponse:
    """
    Handle engine exceptions.

    Client errors are logged as warnings; a 500 carries the traceback.
    """
    status_code = status_for(exc)
    if status_code == 500:
        logger.error(f"Engine error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.warning(f"Request to {request.url.path} failed ({status_code}): {exc}")

    return _error_response(status_code, str(exc), exc.__class__.__name__)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, "HTTPException")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error_response(500, "Internal server error", "InternalError")


def register_exception_handlers(app) -> None:
    app.add_exception_handler(CourseRankError, course_rank_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
