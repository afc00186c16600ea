from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data: Dict[str, Any] = {
            "level": record.levelname,
            "ts": int(time.time() * 1000),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _resolve_level(configured: Optional[str] = None, default: int = logging.INFO) -> int:
    env_level = configured or os.getenv("LOG_LEVEL")
    if not env_level:
        return default
    env_level = env_level.strip()
    if env_level.isdigit():
        return int(env_level)
    lvl = logging.getLevelName(env_level.upper())
    if isinstance(lvl, str):
        return default
    return int(lvl)


def setup_logging(level: int | str | None = None) -> None:
    resolved_level = level if isinstance(level, int) else _resolve_level(level)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved_level)
    logging.getLogger("app").setLevel(resolved_level)
    logging.getLogger("app.brief").setLevel(resolved_level)
    logging.getLogger("app.access").setLevel(resolved_level)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Access log plus request metrics and timing headers."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request.state.request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            dur_ms = (time.perf_counter() - start) * 1000
            request.app.state.state.metrics.record(dur_ms, False, "INTERNAL_ERROR")
            self._log(request, 500, dur_ms, "INTERNAL_ERROR")
            raise
        dur_ms = (time.perf_counter() - start) * 1000
        success = response.status_code < 400
        error_code = None if success else getattr(request.state, "error_code", None) or str(response.status_code)
        request.app.state.state.metrics.record(dur_ms, success, error_code)

        response.headers["X-Response-Time"] = f"{int(dur_ms)}ms"
        response.headers["X-Request-ID"] = request.state.request_id
        self._log(request, response.status_code, dur_ms, error_code)
        return response

    @staticmethod
    def _log(request: Request, status: int, dur_ms: float, error_code: Optional[str]) -> None:
        logging.getLogger("app.access").info(
            json.dumps({
                "request_id": request.state.request_id,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": int(dur_ms),
                "error_code": error_code,
            })
        )


def install_app_logging(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)
