"""Structured logging setup and request-context middleware."""

import logging
import sys
from typing import Optional
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_REQUEST_ID_HEADER = "X-Request-ID"


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Route structlog through stdlib logging with JSON or console output."""

    # Configure the root handler only once
    if not logging.root.handlers:
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=level.upper(),
        )
    else:
        logging.root.setLevel(level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Bind request id, path and method to every log line of a request."""

    def __init__(self, app, *, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        super().__init__(app)
        self._logger = logger or structlog.get_logger(__name__)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(_REQUEST_ID_HEADER) or str(uuid4())

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
            response.headers[_REQUEST_ID_HEADER] = request_id
            self._logger.info("request_completed", status_code=response.status_code)
            return response
        except Exception:
            self._logger.exception("request_failed")
            raise
        finally:
            structlog.contextvars.clear_contextvars()
