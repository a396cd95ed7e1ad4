"""Mapping of domain exceptions to the JSON error envelope."""
import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from household_networth.core.exceptions import AppError, NeedsOnboardingError

logger = logging.getLogger(__name__)

_PYDANTIC_VALUE_ERROR_PREFIX = "Value error, "


@dataclass(frozen=True)
class ErrorMapper:
    """Maps exceptions to (status_code, detail) for HTTP responses.

    Only AppError messages reach the client; anything else collapses to
    fallback_message so storage or library text is never exposed.
    """

    fallback_message: str = "Internal server error"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail)."""
        if isinstance(exc, AppError):
            return (exc.status_code, exc.message)
        if isinstance(exc, RequestValidationError):
            return (400, first_validation_message(exc))
        if isinstance(exc, HTTPException):
            return (exc.status_code, str(exc.detail))
        return (500, self.fallback_message)

    def to_response(self, exc: Exception) -> JSONResponse:
        status_code, detail = self.to_http(exc)
        body: dict[str, object] = {"success": False, "error": detail}
        if isinstance(exc, NeedsOnboardingError):
            body["needsOnboarding"] = True
        return JSONResponse(status_code=status_code, content=body)


def first_validation_message(exc: RequestValidationError) -> str:
    """Return the first human-readable violation from a request validation error."""
    errors = exc.errors()
    if not errors:
        return "Invalid data"
    first = errors[0]
    message = str(first.get("msg") or "Invalid data")
    if message.startswith(_PYDANTIC_VALUE_ERROR_PREFIX):
        return message[len(_PYDANTIC_VALUE_ERROR_PREFIX):]
    if first.get("type") == "missing" and first.get("loc"):
        return f"{first['loc'][-1]} is required"
    if first.get("type") in ("json_invalid", "model_attributes_type", "dict_type"):
        return "Invalid data"
    return message


def install_exception_handlers(app: FastAPI, mapper: ErrorMapper | None = None) -> None:
    """Register handlers that render every failure as {success: false, error}."""
    mapper = mapper or ErrorMapper()

    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return mapper.to_response(exc)

    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected %s %s: %s", request.method, request.url.path, exc.errors()[:1]
        )
        return mapper.to_response(exc)

    async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return mapper.to_response(exc)

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return mapper.to_response(exc)

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(HTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected)
