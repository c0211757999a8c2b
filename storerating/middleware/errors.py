"""
Exception handlers for the store rating API.

Domain errors become ``{"message", "code"}`` bodies with their own status,
request validation failures become 400 with field-level details, and
anything else is logged with its traceback and answered with a generic 500.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from storerating.errors import StoreRatingError, Unauthenticated, ValidationFailed

GENERIC_ERROR_MESSAGE = "Something went wrong!"


def create_error_response(error: StoreRatingError) -> JSONResponse:
    content = {"message": error.message, "code": error.code}
    headers = None
    if isinstance(error, ValidationFailed):
        content["errors"] = error.errors
    if isinstance(error, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=error.status_code, content=content, headers=headers)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        # drop the leading "body"/"path"/"query" segment
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return errors


def setup_exception_handlers(app: FastAPI):
    """Register exception handlers with the FastAPI app."""

    @app.exception_handler(StoreRatingError)
    async def store_rating_exception_handler(request: Request, exc: StoreRatingError):
        logger.info(f"{request.method} {request.url.path}: {exc.code} - {exc.message}")
        return create_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = ValidationFailed(errors=_field_errors(exc))
        logger.info(f"{request.method} {request.url.path}: validation failed {error.errors}")
        return create_error_response(error)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}"
        )
        return JSONResponse(
            status_code=500,
            content={"message": GENERIC_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
        )
