from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from busybrief.app import create_app
from busybrief.config import Settings
from busybrief.services.brief import BriefPipeline
from busybrief.services.prompts import TERSE

SOURCE = (
    "Team sync notes. Alex will send the agenda by tomorrow 3pm. "
    "Need to prepare slides and review budget numbers before the call with finance."
)

_URL = "https://api.openai.com/v1/responses"


def api_status_error(status: int):
    """Build the openai SDK error the client raises for an HTTP status."""
    request = httpx.Request("POST", _URL)
    response = httpx.Response(status, request=request)
    cls = {
        400: openai.BadRequestError,
        401: openai.AuthenticationError,
        403: openai.PermissionDeniedError,
        404: openai.NotFoundError,
        429: openai.RateLimitError,
    }.get(status, openai.InternalServerError if status >= 500 else openai.APIStatusError)
    return cls(f"Error code: {status}", response=response, body=None)


def api_timeout_error():
    return openai.APITimeoutError(request=httpx.Request("POST", _URL))


class FakeCompletionClient:
    """Replays scripted outcomes: a string is returned, an exception is raised."""

    def __init__(self, outcomes: List[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, *, model: str, timeout_s: float) -> str:
        self.calls.append({"messages": messages, "model": model, "timeout_s": timeout_s})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def terse_reply(**overrides: Any) -> str:
    body: Dict[str, Any] = {"summary": ["Budget review before finance call"], "actions": [], "background": []}
    body.update(overrides)
    return json.dumps(body)


def make_pipeline(
    outcomes: Optional[List[Any]],
    contract=TERSE,
    attempts: int = 3,
) -> tuple[BriefPipeline, Optional[FakeCompletionClient], SleepRecorder]:
    client = FakeCompletionClient(outcomes) if outcomes is not None else None
    sleeper = SleepRecorder()
    pipeline = BriefPipeline(
        client,
        contract,
        model="test-model",
        attempts=attempts,
        timeout_s=5.0,
        sleep=sleeper,
    )
    return pipeline, client, sleeper


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key=None, auth_secret=None, brief_contract="terse", _env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def client_for(settings):
    def _build(outcomes: Optional[List[Any]], **settings_overrides: Any) -> TestClient:
        s = settings.model_copy(update=settings_overrides) if settings_overrides else settings
        pipeline, _, _ = make_pipeline(outcomes)
        return TestClient(create_app(settings=s, pipeline=pipeline))

    return _build
