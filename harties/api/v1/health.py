"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from harties.core.config import settings
from harties.schemas.common import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Basic health check"""
    return HealthCheckResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.version,
    )
