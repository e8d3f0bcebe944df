"""
Request ID middleware
"""

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from harties.core.logging import log


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests and to every log line they produce"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        with log.contextualize(request_id=request_id):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response
