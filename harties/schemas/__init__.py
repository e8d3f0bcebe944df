"""
Pydantic schemas for records, seed configuration and reports
"""
from .article import Article, ArticleCreate, ArticleStatus, ScrapedArticle
from .business import BusinessCreate, DayHours
from .common import (
    AdminSummary,
    BatchReport,
    ExtractedImages,
    HealthCheckResponse,
    ResetReport,
    SeedStatus,
    UrlOutcome,
)
from .profile import Profile, UserRole
from .seed import BusinessSeed, KeywordProfile, PublisherProfile, UserSeed

__all__ = [
    "AdminSummary",
    "Article",
    "ArticleCreate",
    "ArticleStatus",
    "BatchReport",
    "BusinessCreate",
    "BusinessSeed",
    "DayHours",
    "ExtractedImages",
    "HealthCheckResponse",
    "KeywordProfile",
    "Profile",
    "PublisherProfile",
    "ResetReport",
    "ScrapedArticle",
    "SeedStatus",
    "UrlOutcome",
    "UserRole",
    "UserSeed",
]
