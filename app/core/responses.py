"""JSON envelopes for success and error responses, and the exception handlers that emit them."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import AppError

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error."

# Default messages for framework-raised HTTP errors (no route, wrong method, ...).
_HTTP_MESSAGES: dict[int, str] = {
    status.HTTP_404_NOT_FOUND: "Route not found.",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed.",
}


def ok(payload: Any, key: str = "data", code: int = status.HTTP_200_OK) -> JSONResponse:
    """Success envelope: {"status": "Ok", <key>: payload, "code": code}."""
    body = {"status": "Ok", key: jsonable_encoder(payload), "code": code}
    return JSONResponse(status_code=code, content=body)


def error(message: Any, code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    """Error envelope: {"status": "Error", "message": message, "code": code}."""
    body = {"status": "Error", "message": jsonable_encoder(message), "code": code}
    return JSONResponse(status_code=code, content=body, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Service error",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return error(GENERIC_SERVER_ERROR, exc.status_code)
    return error(exc.message, exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = _HTTP_MESSAGES.get(exc.status_code)
    if message is None:
        message = exc.detail if isinstance(exc.detail, (str, list, dict)) else str(exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == _HTTP_MESSAGES[404]:
        message = f"Route {request.url.path} not found."
    return error(message, exc.status_code, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "error": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return error(details, status.HTTP_400_BAD_REQUEST)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    return error(GENERIC_SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error through the JSON error envelope."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
