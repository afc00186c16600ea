from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from .errors import error_json

PUBLIC_PATHS = frozenset({"/health"})


def _bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Compare the bearer token against a server-side secret.

    With no secret configured every request is let through.
    """

    def __init__(self, app, secret: Optional[str]) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.secret = secret

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if not self.secret or request.url.path in PUBLIC_PATHS:
            return await call_next(request)
        token = _bearer_token(request.headers.get("authorization"))
        if token is not None and secrets.compare_digest(token.encode("utf-8"), self.secret.encode("utf-8")):
            return await call_next(request)
        client = request.client.host if request.client else "unknown"
        logging.getLogger("app").warning(f"Unauthorized access attempt from {client}")
        request.state.error_code = "UNAUTHORIZED"
        return error_json(401, "Unauthorized: Invalid or missing token", "UNAUTHORIZED")


def install_auth(app: FastAPI, secret: Optional[str], environment: str = "development") -> None:
    secret = (secret or "").strip() or None
    if secret is None and environment.strip().lower() == "production":
        logging.getLogger("app").warning("Security warning: AUTH_SECRET not set in production")
    app.add_middleware(BearerAuthMiddleware, secret=secret)
