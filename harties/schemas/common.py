"""
Common schemas used across services, the CLI and the API
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ExtractedImages(BaseModel):
    """Best-guess images for a business website"""
    cover_image: str
    logo_image: str
    all_images: List[str] = Field(default_factory=list)


class SeedStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    MISSING_PREREQUISITE = "missing_prerequisite"
    FAILED = "failed"


class UrlOutcome(BaseModel):
    """Result of processing one URL in a batch"""
    url: str
    status: SeedStatus
    slug: Optional[str] = None
    error: Optional[str] = None


class BatchReport(BaseModel):
    """Totals for a multi-URL run"""
    outcomes: List[UrlOutcome] = Field(default_factory=list)

    @property
    def successes(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status != SeedStatus.FAILED)

    @property
    def failures(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == SeedStatus.FAILED)


class ResetReport(BaseModel):
    """What a reset plan touched"""
    plan: str
    cleared: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    auth_users_deleted: int = 0


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    timestamp: str
    version: str


class AdminSummary(BaseModel):
    """Row counts shown on the admin dashboard"""
    counts: Dict[str, int]
