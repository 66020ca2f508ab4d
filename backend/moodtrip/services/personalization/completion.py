"""Completion runner — retry, deadline and schema validation around the LLM client.

Every generator goes through this module, so a transport failure, a timeout
and an unparseable response all surface as one of two exceptions:
UpstreamUnavailable or MalformedResponse.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from moodtrip.services.personalization.config import RetryPolicy, TaskParams
from moodtrip.services.personalization.exceptions import (
    MalformedResponse,
    PersonalizationError,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class CompletionClient(Protocol):
    async def complete(
        self,
        system: str,
        user: str,
        *,
        messages: list[dict] | None = None,
        max_tokens: int = 1000,
        temperature: float = 0,
        json_mode: bool = False,
    ) -> str:
        ...


async def call_with_retry(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    label: str,
) -> T:
    """Run an upstream call with bounded exponential backoff.

    Each attempt is bounded by ``policy.timeout``. Only UpstreamUnavailable is
    retried; the last failure is re-raised.
    """

    def _log_retry(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(f"{label} attempt {state.attempt_number}/{policy.max_attempts} failed: {exc}")

    result = None
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, policy.max_attempts)),
        wait=wait_exponential(multiplier=policy.base_delay, max=policy.max_delay),
        retry=retry_if_exception_type(UpstreamUnavailable),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            result = await _attempt(call, policy.timeout, label)
    return result


async def _attempt(call: Callable[[], Awaitable[T]], timeout: float | None, label: str) -> T:
    try:
        if timeout:
            return await asyncio.wait_for(call(), timeout=timeout)
        return await call()
    except PersonalizationError:
        raise
    except asyncio.TimeoutError as e:
        raise UpstreamUnavailable(f"{label} timed out after {timeout:.0f}s") from e
    except Exception as e:
        raise UpstreamUnavailable(f"{label} failed: {e}") from e


def strip_fencing(raw: str) -> str:
    """Remove markdown code fencing the model sometimes adds around JSON."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def parse_json_object(raw: str) -> dict:
    """Parse completion text into a JSON object or raise MalformedResponse."""
    text = strip_fencing(raw or "")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        # Tolerate a preamble or trailer around a single object
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise MalformedResponse(f"Completion is not JSON: {text[:80]!r}")
        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Completion is not JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def validate_payload(payload: dict, schema: type[M]) -> M:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponse(f"{schema.__name__} schema violation: {e.error_count()} error(s)") from e


class CompletionRunner:
    """Calls the completion client with retry and turns text into typed results."""

    def __init__(self, client: CompletionClient, retry: RetryPolicy):
        self._client = client
        self._retry = retry

    async def text(self, system: str, instruction: str, params: TaskParams, label: str) -> str:
        raw = await call_with_retry(
            lambda: self._client.complete(
                system=system,
                user=instruction,
                max_tokens=params.max_tokens,
                temperature=params.temperature,
                json_mode=params.json_mode,
            ),
            self._retry,
            label,
        )
        if not isinstance(raw, str):
            raise MalformedResponse(f"{label}: completion returned {type(raw).__name__}, not text")
        return raw

    async def structured(
        self,
        system: str,
        instruction: str,
        params: TaskParams,
        schema: type[M],
        label: str,
    ) -> M:
        raw = await self.text(system, instruction, params, label)
        return validate_payload(parse_json_object(raw), schema)
