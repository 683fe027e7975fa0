"""
HTTP error handling.

Pipeline exceptions map onto status codes; anything else becomes a generic
500 response with the error logged.
"""

import logging
import uuid
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.exceptions import DeviceNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and request ids."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method} {request.url}: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if request.app.debug else "An unexpected error occurred",
                    "request_id": request.state.request_id
                }
            )

        response.headers["X-Request-ID"] = request.state.request_id
        return response


async def device_not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found", "message": str(exc)})


async def invalid_argument_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid argument", "message": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DeviceNotFoundError, device_not_found_handler)
    app.add_exception_handler(InvalidArgumentError, invalid_argument_handler)
