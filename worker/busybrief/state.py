from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request

from .config import Settings
from .services.brief import BriefPipeline


@dataclass
class MetricsState:
    request_count: int = 0
    success_count: int = 0
    error_count: int = 0
    total_response_ms: float = 0.0
    last_request_ts: Optional[datetime] = None
    errors_by_code: Dict[str, int] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, duration_ms: float, success: bool, error_code: Optional[str] = None) -> None:
        with self.lock:
            self.request_count += 1
            self.total_response_ms += duration_ms
            self.last_request_ts = datetime.now(timezone.utc)
            if success:
                self.success_count += 1
            else:
                self.error_count += 1
                if error_code:
                    self.errors_by_code[error_code] = self.errors_by_code.get(error_code, 0) + 1

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            count = self.request_count
            return {
                "request_count": count,
                "success_count": self.success_count,
                "error_count": self.error_count,
                "average_response_ms": (self.total_response_ms / count) if count else 0.0,
                "last_request_time": self.last_request_ts.isoformat() if self.last_request_ts else None,
                "errors_by_code": dict(self.errors_by_code),
                "success_rate": (self.success_count / count * 100.0) if count else 0.0,
            }


@dataclass
class State:
    """Application state shared across requests, attached to app.state.

    The pipeline is immutable once built; metrics are the only mutable part.
    """

    settings: Settings
    pipeline: BriefPipeline
    metrics: MetricsState = field(default_factory=MetricsState)


def get_state(request: Request) -> State:  # FastAPI dependency helper
    return request.app.state.state
