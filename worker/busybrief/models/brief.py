from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


MIN_INPUT_CHARS = 20
MAX_INPUT_CHARS = 100_000


class ExplainRequest(BaseModel):
    # Left untyped so a missing or non-string input maps to its own error code
    input: Any = Field(default=None, description="Text (email, chat, docs) to brief")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    model: str
    hasApiKey: bool
    contract: str


class MetricsResponse(BaseModel):
    request_count: int
    success_count: int
    error_count: int
    average_response_ms: float
    last_request_time: Optional[str] = None
    errors_by_code: Dict[str, int]
    success_rate: float
