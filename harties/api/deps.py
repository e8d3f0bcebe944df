"""
API Dependencies for dependency injection
"""
from typing import Annotated, Any, Dict

from fastapi import Depends, Request

from harties.core.exceptions import UnauthorizedError
from harties.core.supabase import SupabaseClient


async def get_supabase(request: Request) -> SupabaseClient:
    """Client created at startup"""
    return request.app.state.supabase


SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase)]


async def get_current_user(request: Request) -> Dict[str, Any]:
    """User resolved by the auth guard"""
    user = getattr(request.state, "user", None)
    if not user:
        raise UnauthorizedError("Authentication required")
    return user


CurrentUserDep = Annotated[Dict[str, Any], Depends(get_current_user)]
