"""Custom exceptions and FastAPI exception handlers."""
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)


class CommuteMatchException(Exception):
    """Base exception for the commute matching service."""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(CommuteMatchException):
    """Resource not found."""
    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", status_code=404)


class UnauthorizedError(CommuteMatchException):
    """User not authorized."""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)


class BusinessRuleError(CommuteMatchException):
    """Business rule violation."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class PreconditionError(CommuteMatchException):
    """The user must complete their profile before matching can run."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class FormatError(ValueError):
    """A commute time string is not in HH:MM form."""


def setup_exception_handlers(app: FastAPI):
    """Register custom exception handlers."""

    @app.exception_handler(CommuteMatchException)
    async def commute_match_exception_handler(request: Request, exc: CommuteMatchException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_type": exc.__class__.__name__}
        )

    @app.exception_handler(FormatError)
    async def format_error_handler(request: Request, exc: FormatError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "error_type": "FormatError"}
        )

    @app.exception_handler(InvalidId)
    async def invalid_id_handler(request: Request, exc: InvalidId):
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid ID", "error_type": "InvalidId"}
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # Don't override HTTPException
        if isinstance(exc, HTTPException):
            raise exc

        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "InternalError"}
        )
