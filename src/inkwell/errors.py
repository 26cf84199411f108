"""Error taxonomy shared by the gateway routes and its Litestar handlers."""

import traceback
from typing import Any, Optional

from litestar import Request, Response
from litestar.exceptions import HTTPException, ValidationException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)


class InkwellError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_content(self) -> dict:
        content: dict = {"error": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


class ClientInputError(InkwellError):
    """A required field is missing or malformed."""

    status_code = HTTP_400_BAD_REQUEST


class ConfigurationError(InkwellError):
    """A provider key or setting is missing."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR


class UnauthorizedError(InkwellError):
    status_code = HTTP_401_UNAUTHORIZED


class UpstreamError(InkwellError):
    """Dify or fal.ai answered with a non-2xx status, or could not be reached."""

    status_code = HTTP_502_BAD_GATEWAY


def handle_inkwell_error(request: Request, exc: InkwellError) -> Response:
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        request.logger.error(f"{type(exc).__name__}: {exc.message} ({exc.details})")
    else:
        request.logger.info(f"Rejected request: {exc.message}")
    return Response(content=exc.to_content(), status_code=exc.status_code)


def handle_validation_error(request: Request, exc: ValidationException) -> Response:
    request.logger.info(f"Invalid request body: {exc.detail}")
    return Response(
        content={"error": exc.detail, "details": exc.extra},
        status_code=HTTP_400_BAD_REQUEST,
    )


def handle_http_error(request: Request, exc: HTTPException) -> Response:
    return Response(content={"error": exc.detail}, status_code=exc.status_code)


def handle_unexpected_error(request: Request, exc: Exception) -> Response:
    request.logger.error(f"Unhandled error on {request.url.path}: {traceback.format_exc()}")
    return Response(
        content={"error": "Internal server error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
    )


exception_handlers = {
    InkwellError: handle_inkwell_error,
    ValidationException: handle_validation_error,
    HTTPException: handle_http_error,
    Exception: handle_unexpected_error,
}
