"""
Custom Exception Classes for the Novel Comments service.

Every failure a handler can report to a client is one of three kinds:

- `ValidationError`: a required comment field is missing or empty (400).
- `CommentNotFoundError`: delete-by-id targeted a row that does not exist (404).
- `StoreError`: the storage engine failed (500). The driver's message is
  exposed to the client unless redaction is enabled.

All of them derive from `CommentAPIException`, which carries a message, a
machine-readable error code, the HTTP status and optional details. The handlers
installed by `register_exception_handlers` turn them into the service's JSON
error body, `{"error": <message>}`.
"""

from typing import Optional, Dict, Any
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .logging_config import get_logger

logger = get_logger("core.exceptions")

FIELDS_REQUIRED_MESSAGE = "所有字段都是必需的"
COMMENT_NOT_FOUND_MESSAGE = "评论未找到"
GENERIC_STORE_ERROR_MESSAGE = "服务器内部错误"


class CommentAPIException(Exception):
    """Base exception class for the comments API"""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str = "COMMENT_API_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CommentAPIException):
    """Raised when a required comment field is missing or empty"""

    status_code = 400

    def __init__(self, message: str = FIELDS_REQUIRED_MESSAGE, fields=None):
        super().__init__(
            message,
            "VALIDATION_ERROR",
            {"fields": list(fields or [])},
        )


class CommentNotFoundError(CommentAPIException):
    """Raised when a comment id does not match any stored row"""

    status_code = 404

    def __init__(self, comment_id: Any):
        super().__init__(
            COMMENT_NOT_FOUND_MESSAGE,
            "COMMENT_NOT_FOUND",
            {"comment_id": str(comment_id)},
        )


class StoreError(CommentAPIException):
    """Raised when a storage operation fails"""

    status_code = 500

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(
            reason,
            "STORE_ERROR",
            {"operation": operation, "reason": reason},
        )


def to_error_response(exc: CommentAPIException, redact: bool = False) -> JSONResponse:
    """Convert a CommentAPIException to the JSON error response"""
    message = exc.message
    if redact and isinstance(exc, StoreError):
        message = GENERIC_STORE_ERROR_MESSAGE
    return JSONResponse(status_code=exc.status_code, content={"error": message})


def register_exception_handlers(app: FastAPI, redact_store_errors: bool = False):
    """Install the handlers that map exceptions to `{"error": ...}` bodies"""

    async def handle_api_exception(request: Request, exc: CommentAPIException):
        log_extra = {
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        }
        if isinstance(exc, StoreError):
            logger.error(
                f"Store failure during {exc.operation}: {exc.reason}",
                extra=log_extra,
            )
        else:
            logger.info(f"Client error: {exc.message}", extra=log_extra)
        return to_error_response(exc, redact=redact_store_errors)

    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Malformed comment bodies are reported like missing fields
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        logger.info(
            "Rejected malformed request body",
            extra={"path": request.url.path, "fields": fields},
        )
        return to_error_response(ValidationError(fields=fields))

    app.add_exception_handler(CommentAPIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
