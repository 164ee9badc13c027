"""
Bearer-token guard for the campaign-uplift API.

``POST /api/recompute`` replaces the whole uplift table, so every ``/api``
route requires ``Authorization: Bearer <token>`` once ``API_AUTH_TOKEN``
(or an explicit token) is configured.  ``/health`` and the docs stay open.

Rejections use the same body as a failed recompute
(``{"success": false, "error": ..., "code": "UNAUTHORIZED"}``) so a
scheduler calling the trigger handles both the same way.
"""

from __future__ import annotations

import os
import secrets
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

_OPEN_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json", "/"})


def _bearer_token(request: Request) -> str | None:
    """Token from the Authorization header, or None if absent or not Bearer."""
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def _unauthorized(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"success": False, "error": reason, "code": "UNAUTHORIZED"},
        headers={"WWW-Authenticate": "Bearer"},
    )


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """
    Guards the recompute trigger and the uplift views.

    Uses ``token`` if given, else ``API_AUTH_TOKEN``.  An empty token
    disables the guard.
    """

    def __init__(self, app: Callable, token: str | None = None):
        super().__init__(app)
        self._token = token if token is not None else os.getenv("API_AUTH_TOKEN", "")
        if self._token:
            logger.info("API auth enabled: /api routes require a bearer token")
        else:
            logger.warning("API auth disabled: POST /api/recompute is open to any caller")

    def _requires_token(self, path: str) -> bool:
        return bool(self._token) and path not in _OPEN_PATHS and path.startswith("/api")

    async def dispatch(self, request: Request, call_next: Callable):
        path = request.url.path
        if not self._requires_token(path):
            return await call_next(request)

        provided = _bearer_token(request)
        if provided is None:
            logger.warning(f"Rejected {request.method} {path}: missing bearer token")
            return _unauthorized("Missing bearer token")
        if not secrets.compare_digest(provided.encode(), self._token.encode()):
            logger.warning(f"Rejected {request.method} {path}: invalid bearer token")
            return _unauthorized("Invalid bearer token")
        return await call_next(request)
