from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from checkresume.core.config import settings

logger = logging.getLogger(__name__)


class AppError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "INTERNAL_ERROR",
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


class ValidationError(AppError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(
            message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="VALIDATION_ERROR",
            details=details,
        )


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, code="NOT_FOUND")


class ExternalServiceError(AppError):
    def __init__(self, message: str, service: str = "EXTERNAL_SERVICE"):
        super().__init__(
            message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="EXTERNAL_SERVICE_ERROR",
        )
        self.service = service


class PersistenceError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code="DATABASE_ERROR")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "api_error code=%s status=%s method=%s path=%s: %s",
        exc.code,
        exc.status_code,
        request.method,
        request.url.path,
        exc.message,
    )
    body: dict[str, Any] = {
        "error": exc.message,
        "code": exc.code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if settings.environment == "development" and exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)
