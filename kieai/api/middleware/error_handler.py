"""Global error-handling middleware.

Translates SDK errors into structured JSON responses with an HTTP status
derived from the error kind.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from kieai.utils.exceptions import ErrorKind, KieAIError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)

# Map error kinds to HTTP status codes; anything else is a 500.
_STATUS_MAP: dict[ErrorKind, int] = {
    ErrorKind.PLUGIN_NOT_REGISTERED: 404,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.UNKNOWN_MODEL: 422,
    ErrorKind.HTTP_FAILURE: 502,
    ErrorKind.NETWORK_ERROR: 502,
    ErrorKind.TIMEOUT_ERROR: 504,
}


def status_for(exc: KieAIError) -> int:
    return _STATUS_MAP.get(exc.kind, 500)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Wrap every request and convert exceptions to JSON error responses.

    Unknown exceptions are logged and returned as HTTP 500.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)

        except KieAIError as exc:
            status_code = status_for(exc)
            logger.warning(
                "handled_error",
                error_type=type(exc).__name__,
                kind=exc.kind.value,
                status_code=status_code,
                detail=exc.message,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=status_code,
                content={"error": type(exc).__name__, "kind": exc.kind.value, "detail": exc.message},
            )

        except Exception as exc:
            logger.error(
                "unhandled_error",
                error_type=type(exc).__name__,
                detail=str(exc),
                path=request.url.path,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "InternalServerError",
                    "kind": ErrorKind.UNKNOWN_ERROR.value,
                    "detail": "An unexpected error occurred.",
                },
            )
