from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from framework.logging.logger import get_logger
from framework.exceptions.errors import (
    PersistenceError,
    StoreUnavailable,
    ConstraintViolation,
    InvalidQuery,
)
from typing import Any
from framework.config import settings

logger = get_logger("exception_handler")


def fail(code: int = 400, message: str = "error", data: Any = None) -> dict:
    return {"code": code, "message": message, "data": data}


def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    trace_id = getattr(request.state, "trace_id", "unknown")

    if isinstance(exc, StoreUnavailable):
        logger.critical(f"Trace[{trace_id}] - StoreUnavailable: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=fail(code=503, message="Service temporarily unavailable")
        )

    if isinstance(exc, ConstraintViolation):
        logger.warning(f"Trace[{trace_id}] - ConstraintViolation: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=fail(code=409, message="Data conflict", data=exc.detail)
        )

    if isinstance(exc, InvalidQuery):
        logger.warning(f"Trace[{trace_id}] - InvalidQuery: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=fail(code=400, message=exc.message)
        )

    if isinstance(exc, PersistenceError):
        logger.error(f"Trace[{trace_id}] - {type(exc).__name__}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=fail(code=500, message="System busy, please try again later")
        )

    if isinstance(exc, RequestValidationError):
        logger.error(f"Trace[{trace_id}] - ValidationError: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=fail(code=422, message="Invalid request parameters", data=exc.errors())
        )

    if isinstance(exc, SQLAlchemyError):
        logger.critical(f"Trace[{trace_id}] - DatabaseError: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=fail(code=500, message="Service temporarily unavailable")
        )

    logger.opt(exception=True).error(f"Trace[{trace_id}] - UncaughtException: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=fail(
            code=500,
            message="System busy, please try again later",
            data={"trace_id": trace_id} if settings.DEBUG else None
        )
    )
