import logging
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

request_context: ContextVar[Optional[Request]] = ContextVar("request_context", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Expose the request being handled through ``request_context``"""

    async def dispatch(self, request: Request, call_next):
        token = request_context.set(request)
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


class RequestContextFilter(logging.Filter):
    """Stamp the current request's method and path on log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        request = request_context.get()
        record.method = request.method if request else "-"
        record.path = request.url.path if request else "-"
        return True
