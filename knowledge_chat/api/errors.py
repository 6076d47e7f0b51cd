"""
Exception handlers.

Map the KnowledgeChatException hierarchy and request schema errors to the
{"error": string, "code"?: string} body. Internal details are logged, never
returned.

Dependencies: fastapi, knowledge_chat.core.exceptions
System role: HTTP error rendering
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from knowledge_chat.core.exceptions import KnowledgeChatException
from knowledge_chat.models.common import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, code: str | None = None) -> JSONResponse:
    """Render the shared error body."""
    body = ErrorResponse(error=error, code=code).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


async def knowledge_chat_exception_handler(
    request: Request,
    exc: KnowledgeChatException,
) -> JSONResponse:
    """Render a domain exception with its status, code and public message."""
    if exc.status_code >= 500:
        logger.error(f"{__name__}:handler - {request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(
            f"{__name__}:handler - {request.method} {request.url.path} rejected "
            f"({exc.status_code} {exc.code}): {exc}"
        )
    return error_response(exc.status_code, exc.public_message, exc.code)


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render request schema errors as 400 VALIDATION_ERROR."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = "malformed request"
    return error_response(400, f"Invalid request: {detail}", "VALIDATION_ERROR")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: generic 500 without internal detail."""
    logger.exception(f"{__name__}:handler - Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to the application."""
    app.add_exception_handler(KnowledgeChatException, knowledge_chat_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
