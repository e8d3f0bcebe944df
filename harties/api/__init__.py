"""
HTTP routers
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .profile import router as profile_router

site_router = APIRouter()

site_router.include_router(profile_router, tags=["profile"])
site_router.include_router(admin_router, tags=["admin"])
