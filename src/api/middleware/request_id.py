"""
Request correlation and service headers middleware

Ensures every response has an `X-Request-ID` header for correlation and
an `X-Service-Version` header naming the build that produced it. The
request id is stored in `request.state.request_id` for downstream use.
"""

from __future__ import annotations

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        service_version: str,
        header_name: str = "X-Request-ID",
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.service_version = service_version

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        req_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = req_id
        response = await call_next(request)
        response.headers.setdefault(self.header_name, req_id)
        response.headers.setdefault("X-Service-Version", self.service_version)
        return response
