# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError

# Local application imports
from decisiondeck.core.exceptions import AppError, RateLimitExceededError, StorageError
from decisiondeck.core.monitoring.logging import get_logger
from decisiondeck.schemas.common import BaseResponse
from decisiondeck.settings import settings

logger = get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    # Map specific HTTP status codes to custom error codes
    error_map = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
    }

    @app.exception_handler(AppError)
    async def app_error_handler(
        request: Request,  # noqa
        exc: AppError,
    ) -> JSONResponse:
        response = BaseResponse.failure(code=exc.code, message=exc.message, details=exc.details)
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        error_code = error_map.get(exc.status_code, "error")
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        messages = []
        field_errors = []
        for error in exc.errors():
            message = error.get("msg", "")

            # Clean up common prefixes in error messages
            val_error_prefix = "Value error, "
            if message.startswith(val_error_prefix):
                message = message[len(val_error_prefix) :]

            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            field = ".".join(location) or "request"
            messages.append(message)
            field_errors.append({"field": field, "message": message})

        max_errors = 5
        shown = messages[:max_errors]
        if len(messages) > max_errors:
            shown.append("...and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(
            code="bad_request",
            message=detail,
            details=field_errors,
        )
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(SQLAlchemyError)
    async def storage_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        sentry_sdk.capture_exception(exc)
        error = StorageError()
        message = error.message if settings.ENVIRONMENT == "production" else f"{error.message}: {exc.__class__.__name__}"
        response = BaseResponse.failure(code=error.code, message=message)
        return JSONResponse(status_code=error.status_code, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,  # noqa
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(f"Unhandled error: {exc}")
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="internal_server_error",
            message="An unexpected error occurred. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())
