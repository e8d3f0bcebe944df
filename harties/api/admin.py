"""
Admin dashboard endpoints (role checked by the auth guard)
"""
from fastapi import APIRouter, Request

from harties.api.deps import SupabaseDep
from harties.api.limiter import limiter
from harties.core.config import settings
from harties.schemas.common import AdminSummary

router = APIRouter()

SUMMARY_TABLES = ("businesses", "articles", "profiles")


@router.get("/admin/summary", response_model=AdminSummary)
@limiter.limit(settings.rate_limit)
async def admin_summary(request: Request, supabase: SupabaseDep) -> AdminSummary:
    """Row counts for the main tables"""
    counts = {}
    for table in SUMMARY_TABLES:
        counts[table] = await supabase.table(table).count()
    return AdminSummary(counts=counts)
