from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from ..config import Settings
from ..errors import AppError, empty_model_response

logger = logging.getLogger("app.brief")


class FailureCause(str, Enum):
    """Closed set of reasons an attempt can fail."""

    CLIENT = "client"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CONTRACT_VIOLATION = "contract_violation"
    TRANSIENT = "transient"


_CONTRACT_CODES = {"EMPTY_MODEL_RESPONSE", "INVALID_MODEL_RESPONSE"}


def classify_failure(exc: BaseException) -> FailureCause:
    if isinstance(exc, AppError):
        if exc.code in _CONTRACT_CODES:
            return FailureCause.CONTRACT_VIOLATION
        if exc.status < 500:
            return FailureCause.CLIENT
        return FailureCause.TRANSIENT
    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code
        if status == 401:
            return FailureCause.UNAUTHORIZED
        if status == 403:
            return FailureCause.FORBIDDEN
        if status == 400:
            return FailureCause.BAD_REQUEST
        if status == 429:
            return FailureCause.RATE_LIMITED
        if status >= 500:
            return FailureCause.SERVER_ERROR
    # Timeouts, connection resets and other 4xx statuses
    return FailureCause.TRANSIENT


class CompletionClient:
    """Thin async wrapper over one shared OpenAI client handle.

    Built once at startup and never mutated afterwards; the SDK's own retry
    loop is disabled so the brief pipeline alone decides when to retry.
    """

    def __init__(self, client: AsyncOpenAI) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["CompletionClient"]:
        api_key = settings.api_key
        if not api_key:
            logger.warning("OPENAI_API_KEY not set; briefs will fail with MISSING_API_KEY")
            return None
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=settings.openai_base_url or None,
            max_retries=0,
            timeout=settings.timeout_s,
        )
        return cls(client)

    async def complete(self, messages: List[Dict[str, str]], *, model: str, timeout_s: float) -> str:
        response = await self._client.responses.create(
            model=model,
            input=messages,
            text={"format": {"type": "text"}},
            timeout=timeout_s,
        )
        raw = (response.output_text or "").strip()
        if not raw:
            raise empty_model_response()
        return raw
