"""Exception handlers for the calendar engine FastAPI application.

This module converts calendar engine errors and other Python exceptions into
consistent JSON responses of the form ``{"error": ..., "detail": ...}``.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.errors import CalendarError

logger = logging.getLogger(__name__)


# Status code for each CalendarError kind. Kinds not listed map to 400.
ERROR_STATUS_CODES = {
    "InvalidRange": status.HTTP_400_BAD_REQUEST,
    "InvalidSeries": status.HTTP_400_BAD_REQUEST,
    "SeriesSpanError": status.HTTP_400_BAD_REQUEST,
    "InvalidEnum": status.HTTP_400_BAD_REQUEST,
    "InvalidValue": status.HTTP_400_BAD_REQUEST,
    "InvalidTimezone": status.HTTP_400_BAD_REQUEST,
    "InvalidCalendarName": status.HTTP_400_BAD_REQUEST,
    "NotFound": status.HTTP_404_NOT_FOUND,
    "CalendarNotFound": status.HTTP_404_NOT_FOUND,
    "DuplicateEvent": status.HTTP_409_CONFLICT,
    "AmbiguousMatch": status.HTTP_409_CONFLICT,
    "ConflictingEvent": status.HTTP_409_CONFLICT,
    "NoActiveCalendar": status.HTTP_409_CONFLICT,
    "DuplicateCalendar": status.HTTP_409_CONFLICT,
}


async def calendar_error_handler(request: Request, exc: CalendarError):
    """Handle every CalendarError subclass.

    The error's ``kind`` picks the status code and is returned as ``error``.
    CalendarNotFoundError responses also list the calendars that do exist.

    Args:
        request: The incoming request that triggered the error.
        exc: The CalendarError exception.

    Returns:
        JSONResponse with the mapped status code.
    """
    content = {"error": exc.kind, "detail": exc.message}
    available = getattr(exc, "available", None)
    if available is not None:
        content["available_calendars"] = available

    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        content=content,
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def runtime_error_handler(request: Request, exc: RuntimeError):
    """Handle RuntimeError exceptions (e.g. the coordinator is not initialized).

    Args:
        request: The incoming request that triggered the error.
        exc: The RuntimeError exception.

    Returns:
        JSONResponse with error details.
    """
    logger.error(f"Runtime error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Runtime Error",
            "detail": str(exc),
            "type": "RuntimeError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    This is a catch-all handler for unexpected errors. It logs the traceback
    and keeps it out of the response.

    Args:
        request: The incoming request that triggered the error.
        exc: The exception that was raised.

    Returns:
        JSONResponse with generic error message.
    """
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
