"""
Middleware components for FastAPI
"""

from .auth import AuthGuardMiddleware
from .request_id import RequestIDMiddleware

__all__ = ["AuthGuardMiddleware", "RequestIDMiddleware"]
