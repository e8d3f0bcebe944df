"""
Signed-in user endpoints
"""
from fastapi import APIRouter, Request

from harties.api.deps import CurrentUserDep, SupabaseDep
from harties.api.limiter import limiter
from harties.core.config import settings
from harties.core.exceptions import NotFoundError
from harties.schemas.profile import Profile

router = APIRouter()


@router.get("/profile", response_model=Profile)
@limiter.limit(settings.rate_limit)
async def get_profile(request: Request, user: CurrentUserDep, supabase: SupabaseDep) -> Profile:
    """Profile of the current user"""
    row = await supabase.table("profiles").select("*").eq("id", user["id"]).maybe_single()
    if not row:
        raise NotFoundError("Profile not found", user_id=user["id"])
    return Profile(**row)
