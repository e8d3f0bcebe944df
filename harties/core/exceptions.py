"""
Custom exceptions for the application
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class HartiesError(Exception):
    """Base class for tooling errors"""


class ConfigurationError(HartiesError):
    """Required configuration is missing or invalid"""


class ScrapeError(HartiesError):
    """A page could not be fetched or yielded no usable content"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class SupabaseError(HartiesError):
    """Error response from the Supabase REST or Auth API"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    @property
    def is_missing_table(self) -> bool:
        """True when the error reports a table that does not exist"""
        # 42P01: undefined_table, PGRST205: table missing from the schema cache
        if self.code in ("42P01", "PGRST205"):
            return True
        return "does not exist" in self.message or "Could not find the table" in self.message

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} ({self.code})"
        return self.message


class BaseAPIException(HTTPException):
    """Base exception for API errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(status_code=self.status_code, detail=detail or self.detail, headers=headers or self.headers)
        # Store any additional context
        self.context = kwargs


class NotFoundError(BaseAPIException):
    """Resource not found"""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"


class UnauthorizedError(BaseAPIException):
    """Unauthorized access"""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


def _error_body(request: Request, message: str, error_type: str, context: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "error": {"message": message, "type": error_type, "context": context},
        "request_id": getattr(request.state, "request_id", None),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def handle_api_exception(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle API exceptions with structured response"""
    body = _error_body(request, exc.detail, exc.__class__.__name__, getattr(exc, "context", {}))
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def handle_supabase_exception(request: Request, exc: SupabaseError) -> JSONResponse:
    """Upstream database errors surface as 503"""
    from harties.core.logging import log

    log.error(f"Supabase error on {request.url.path}: {exc}")
    body = _error_body(request, "Database unavailable", "ExternalServiceError", {"code": exc.code})
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    from harties.core.config import settings
    from harties.core.logging import log

    # Log the full exception
    log.opt(exception=exc).error("Unexpected error")

    # Don't expose internal errors in production
    detail = str(exc) if settings.debug else "An unexpected error occurred"
    body = _error_body(request, detail, "InternalServerError", {})
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
