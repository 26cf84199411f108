from contextvars import ContextVar
import logging
import uuid

from litestar.datastructures import Headers, MutableScopeHeaders
from litestar.middleware.base import ASGIMiddleware
from litestar.types import ASGIApp, Message, Receive, Scope, Send

CORRELATION_HEADER = "X-Correlation-ID"
NO_REQUEST = "system"

correlation_id_contextvar: ContextVar[str] = ContextVar("correlation_id")


class CorrelationFilter(logging.Filter):
    """Stamps the current request's correlation ID onto each record."""

    def __init__(self, contextvar: ContextVar[str] = correlation_id_contextvar):
        super().__init__()
        self.contextvar = contextvar

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = self.contextvar.get(NO_REQUEST)
        return True


class CorrelationFormatter(logging.Formatter):
    """Formatter for records that bypassed the filter, e.g. from a queue listener."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_REQUEST
        return super().format(record)


class CorrelationMiddleware(ASGIMiddleware):
    """Reuses the caller's X-Correlation-ID or mints one, and echoes it on the response."""

    def __init__(self, contextvar: ContextVar[str] = correlation_id_contextvar):
        super().__init__()
        self.contextvar = contextvar

    async def handle(self, scope: Scope, receive: Receive, send: Send, next_app: ASGIApp) -> None:
        if scope["type"] != "http":
            await next_app(scope, receive, send)
            return

        correlation_id = Headers.from_scope(scope).get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = self.contextvar.set(correlation_id)

        async def send_with_correlation(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableScopeHeaders.from_message(message=message)[CORRELATION_HEADER] = correlation_id
            await send(message)

        try:
            await next_app(scope, receive, send_with_correlation)
        finally:
            self.contextvar.reset(token)
