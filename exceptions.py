"""
Exception hierarchy and FastAPI error handlers.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RentMatchError(Exception):
    """Base exception for all RentMatch errors."""


class InvalidInputError(RentMatchError, ValueError):
    """Raised when a numeric argument is non-finite or out of its domain."""


class NotFoundError(RentMatchError):
    """Raised when a referenced entity does not exist."""


class ConflictError(RentMatchError):
    """Raised when a create would duplicate a unique entity."""


async def rentmatch_exception_handler(request: Request, exc: RentMatchError) -> JSONResponse:
    status_code = 500
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, (InvalidInputError, ConflictError)):
        status_code = 400

    if status_code == 500:
        logger.error(f"Unhandled service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    return JSONResponse(status_code=status_code, content={"message": str(exc)})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})
