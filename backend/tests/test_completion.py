import pytest
from pydantic import BaseModel

from conftest import FakeCompletionClient

from moodtrip.services.personalization.completion import (
    CompletionRunner,
    call_with_retry,
    parse_json_object,
    strip_fencing,
    validate_payload,
)
from moodtrip.services.personalization.config import RetryPolicy, TaskParams
from moodtrip.services.personalization.exceptions import MalformedResponse, UpstreamUnavailable

NO_WAIT = RetryPolicy(max_attempts=3, base_delay=0, max_delay=0, timeout=1.0)
PARAMS = TaskParams(temperature=0.5, max_tokens=100)


class Greeting(BaseModel):
    text: str


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"a": 1}', '{"a": 1}'),
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}```', '{"a": 1}'),
        ('  \n{"a": 1}\n  ', '{"a": 1}'),
    ],
)
def test_strip_fencing(raw, expected):
    assert strip_fencing(raw) == expected


def test_parse_json_object_tolerates_preamble():
    assert parse_json_object('Sure! Here you go: {"a": {"b": 2}} Enjoy.') == {"a": {"b": 2}}


@pytest.mark.parametrize("raw", ["", "no json here", "[1, 2, 3]", '"just a string"', "{broken"])
def test_parse_json_object_rejects_non_objects(raw):
    with pytest.raises(MalformedResponse):
        parse_json_object(raw)


def test_validate_payload_maps_validation_error():
    assert validate_payload({"text": "hi"}, Greeting).text == "hi"
    with pytest.raises(MalformedResponse):
        validate_payload({"words": "hi"}, Greeting)


async def test_call_with_retry_stops_after_max_attempts():
    attempts = []

    async def always_down():
        attempts.append(1)
        raise UpstreamUnavailable("down")

    with pytest.raises(UpstreamUnavailable):
        await call_with_retry(always_down, NO_WAIT, "test")
    assert len(attempts) == 3


async def test_call_with_retry_wraps_unexpected_errors():
    async def broken():
        raise ConnectionError("reset by peer")

    with pytest.raises(UpstreamUnavailable, match="reset by peer"):
        await call_with_retry(broken, RetryPolicy(max_attempts=1, base_delay=0), "test")


async def test_call_with_retry_does_not_retry_malformed():
    attempts = []

    async def garbled():
        attempts.append(1)
        raise MalformedResponse("garbled")

    with pytest.raises(MalformedResponse):
        await call_with_retry(garbled, NO_WAIT, "test")
    assert len(attempts) == 1


async def test_call_with_retry_zero_attempts_still_calls_once():
    async def ok():
        return "ok"

    assert await call_with_retry(ok, RetryPolicy(max_attempts=0, base_delay=0), "test") == "ok"


async def test_runner_structured_success_after_retry():
    client = FakeCompletionClient(UpstreamUnavailable("429"), '{"text": "hello"}')
    runner = CompletionRunner(client, NO_WAIT)

    result = await runner.structured("sys", "say hi", PARAMS, Greeting, "greeting")

    assert result == Greeting(text="hello")
    assert len(client.calls) == 2
    assert client.calls[0]["system"] == "sys"
    assert client.calls[0]["temperature"] == 0.5
    assert client.calls[0]["max_tokens"] == 100


async def test_runner_text_rejects_non_text():
    runner = CompletionRunner(FakeCompletionClient(None), NO_WAIT)

    with pytest.raises(MalformedResponse):
        await runner.text("sys", "hi", PARAMS, "chat")
