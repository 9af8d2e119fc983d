"""
Last-resort exception handlers.

Services raise HTTPException for the failures they understand (400, 404,
409). Anything else that escapes a route is converted here, so no raw
exception ever reaches the client.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from app.core.storage_utils import StorageError

logger = logging.getLogger(__name__)

# Store errors worth retrying: connection dropped, pool exhausted, server
# shutting down.
TRANSIENT_DB_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.exception("Integrity error on %s %s", request.method, request.url.path)
    return _error(
        status.HTTP_409_CONFLICT,
        "Duplicate entry or invalid reference",
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    if isinstance(exc, TRANSIENT_DB_ERRORS):
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Database temporarily unavailable",
        )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def storage_error_handler(request: Request, exc: StorageError):
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_502_BAD_GATEWAY, "Media storage request failed")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class in the MRO, so the
    # IntegrityError handler wins over the SQLAlchemyError one.
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
