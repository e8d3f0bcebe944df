"""
Route guard for signed-in and admin-only pages
"""
from typing import Iterable, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from harties.core.config import settings
from harties.core.exceptions import SupabaseError, handle_supabase_exception
from harties.core.logging import log

STATIC_PREFIXES = ("/_next/static", "/_next/image", "/favicon.ico")
STATIC_EXTENSIONS = (".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp")


def is_static_asset(path: str) -> bool:
    return path.startswith(STATIC_PREFIXES) or path.lower().endswith(STATIC_EXTENSIONS)


def matches_prefix(path: str, prefixes: Iterable[str]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


def extract_access_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie"""
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
        if token:
            return token
    return request.cookies.get(settings.auth_cookie_name) or None


class AuthGuardMiddleware(BaseHTTPMiddleware):
    """
    Redirects anonymous visitors of protected paths to /?auth=required and
    non-staff visitors of admin paths to /?error=unauthorized.

    The resolved user and, on admin paths, the profile are left on
    request.state for the route handlers.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if is_static_asset(path) or not matches_prefix(path, settings.protected_paths):
            return await call_next(request)

        try:
            return await self._guard(request, call_next, path)
        except SupabaseError as e:
            # Exception handlers do not see errors raised inside middleware
            return await handle_supabase_exception(request, e)

    async def _guard(self, request: Request, call_next, path: str):
        supabase = request.app.state.supabase
        token = extract_access_token(request)
        user = await supabase.auth.get_user(token) if token else None

        if not user:
            log.info(f"Anonymous request to {path}, redirecting to sign in")
            return RedirectResponse(url="/?auth=required")

        request.state.user = user

        if matches_prefix(path, settings.admin_paths):
            profile = await supabase.table("profiles").select("id, email, full_name, role").eq(
                "id", user["id"]
            ).maybe_single()
            if not profile or profile.get("role") not in settings.admin_roles:
                log.warning(f"User {user.get('email')} denied access to {path}")
                return RedirectResponse(url="/?error=unauthorized")
            request.state.profile = profile

        return await call_next(request)
