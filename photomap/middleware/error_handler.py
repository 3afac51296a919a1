"""Global error handling middleware.

This module provides centralized exception handling with
structured JSON responses and request tracking. Every error body
has the same shape::

    {"error": "...", "kind": "...", "details": {...}, "request_id": "..."}
"""

import logging
import traceback
import uuid
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from photomap.core.exceptions import AppException

logger = logging.getLogger(__name__)


def _error_body(request: Request, message: str, kind: str, details: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "error": message,
        "kind": kind,
        "details": details,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for tagging requests and catching unexpected exceptions.

    Application exceptions are answered by the handlers registered in
    :func:`setup_exception_handlers`; anything that escapes them is
    logged with its traceback and turned into a generic 500.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Process request and handle any exceptions.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            Response from handler or error response.
        """
        # Generate unique request ID for tracing
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled exception: {str(exc)}\n{traceback.format_exc()}",
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_body(request, "Internal server error", "internal_error", {}),
                headers={"X-Request-ID": request_id},
            )

        response.headers["X-Request-ID"] = request_id
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Handle AppException with structured response.

        Args:
            request: Incoming HTTP request.
            exc: Application exception instance.

        Returns:
            JSON response with error details.
        """
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.kind}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.message, exc.kind, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed requests with the common error shape."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                request,
                "Invalid request",
                "validation_error",
                {"errors": jsonable_encoder(exc.errors())},
            ),
        )
