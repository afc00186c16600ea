from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from ..config import Settings
from ..errors import invalid_model_response, missing_api_key, upstream_failure
from .normalizer import parse_model_output
from .prompts import PromptContract, build_messages, get_contract
from .retry import FailureRecord, backoff_seconds, terminal_error
from .upstream import CompletionClient, classify_failure
from .validator import PROVENANCE_WINDOW, Invalid, validate_payload

logger = logging.getLogger("app.brief")


class Completer(Protocol):
    async def complete(self, messages: List[Dict[str, str]], *, model: str, timeout_s: float) -> str:
        ...


class BriefPipeline:
    """Prompt -> completion -> normalise -> validate, under the retry policy.

    One instance is shared by all requests; it holds only immutable
    configuration and the upstream client handle.
    """

    def __init__(
        self,
        client: Optional[Completer],
        contract: PromptContract,
        *,
        model: str,
        attempts: int = 3,
        timeout_s: float = 30.0,
        window: int = PROVENANCE_WINDOW,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.contract = contract
        self.model = model
        self.attempts = max(1, attempts)
        self.timeout_s = timeout_s
        self.window = window
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "BriefPipeline":
        return cls(
            CompletionClient.from_settings(settings),
            get_contract(settings.brief_contract),
            model=settings.openai_model,
            attempts=settings.attempts,
            timeout_s=settings.timeout_s,
        )

    @property
    def has_client(self) -> bool:
        return self.client is not None

    async def _attempt(self, text: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        if self.client is None:
            raise missing_api_key()
        raw = await self.client.complete(messages, model=self.model, timeout_s=self.timeout_s)
        parsed = parse_model_output(raw)
        outcome = validate_payload(parsed, text, self.contract, window=self.window)
        if isinstance(outcome, Invalid):
            raise invalid_model_response(outcome.reason)
        return outcome.brief

    async def produce_brief(self, text: str) -> Dict[str, Any]:
        messages = build_messages(self.contract, text)
        last: Optional[FailureRecord] = None

        for attempt in range(1, self.attempts + 1):
            try:
                brief = await self._attempt(text, messages)
            except Exception as e:
                cause = classify_failure(e)
                last = FailureRecord(attempt, cause, str(e) or e.__class__.__name__)
                delay = backoff_seconds(cause, attempt)
                if delay is None:
                    err = terminal_error(cause, e)
                    logger.error("brief failed without retry: cause=%s code=%s", cause.value, err.code)
                    if err is e:
                        raise
                    raise err from e
                if attempt >= self.attempts:
                    logger.warning("brief attempt %s/%s failed: cause=%s %s", attempt, self.attempts, cause.value, last.message)
                    break
                logger.warning(
                    "brief attempt %s/%s failed: cause=%s retrying in %.2fs: %s",
                    attempt,
                    self.attempts,
                    cause.value,
                    delay,
                    last.message,
                )
                await self._sleep(delay)
                continue

            logger.info("brief produced: contract=%s attempt=%s", self.contract.name, attempt)
            return brief

        logger.error("brief failed after %s attempt(s)", self.attempts)
        raise upstream_failure(self.attempts, last.message if last else None)
