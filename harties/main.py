"""
Harties Local web guard - FastAPI application
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from harties.api import site_router
from harties.api.limiter import limiter
from harties.api.v1 import api_router
from harties.core.config import settings
from harties.core.exceptions import (
    BaseAPIException,
    SupabaseError,
    handle_api_exception,
    handle_supabase_exception,
    handle_unexpected_exception,
)
from harties.core.logging import log, setup_logging
from harties.core.supabase import SupabaseClient
from harties.middleware import AuthGuardMiddleware, RequestIDMiddleware

API_V1_STR = "/api/v1"


def create_application(supabase: Optional[SupabaseClient] = None) -> FastAPI:
    """
    Create FastAPI application with all configurations

    Args:
        supabase: Client to use instead of one built from settings at startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        log.info(f"Starting {settings.app_name} {settings.version} ({settings.environment})")

        owns_client = supabase is None
        if owns_client:
            app.state.supabase = SupabaseClient.from_settings()

        yield

        log.info(f"Shutting down {settings.app_name}")
        if owns_client:
            await app.state.supabase.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        openapi_url=f"{API_V1_STR}/openapi.json" if settings.debug else None,
        docs_url=f"{API_V1_STR}/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
        debug=settings.debug,
    )
    if supabase is not None:
        app.state.supabase = supabase
    app.state.limiter = limiter

    # Add custom exception handlers
    app.add_exception_handler(BaseAPIException, handle_api_exception)
    app.add_exception_handler(SupabaseError, handle_supabase_exception)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    # Last added runs first: request IDs are bound before the guard logs
    app.add_middleware(AuthGuardMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api_router, prefix=API_V1_STR)
    app.include_router(site_router)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information"""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.environment,
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "harties.main:create_application",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_config=None,
        access_log=False,
    )
