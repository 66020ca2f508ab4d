import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("ANTHROPIC_API_KEY", "")

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from moodtrip.services.personalization.config import RetryPolicy, personalization_config
from moodtrip.services.personalization.exceptions import UpstreamUnavailable
from moodtrip.services.personalization.profile import TripRecord
from moodtrip.services.personalization.profile_cache import ProfileCache
from moodtrip.services.personalization.service import PersonalizationService

TODAY = date(2025, 7, 15)  # summer


def make_trip(
    destination: str | None = "Paris, France",
    *,
    created: str = "2025-01-01T10:00:00",
    start: date | None = None,
    end: date | None = None,
    budget: float | None = None,
    travelers: int = 1,
    mood: str | None = None,
) -> TripRecord:
    return TripRecord(
        created_at=datetime.fromisoformat(created).replace(tzinfo=timezone.utc),
        destination=destination,
        start_date=start,
        end_date=end,
        budget=budget,
        traveler_count=travelers,
        mood_tag=mood,
    )


class FakeTripStore:
    """In-memory trip store; set ``fail`` to simulate an unreachable database."""

    def __init__(self, trips: dict[str, list[TripRecord]] | None = None):
        self.trips = trips or {}
        self.fail = False
        self.calls = 0

    async def list_trips(self, user_id: str) -> list[TripRecord]:
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable("database is down")
        return list(self.trips.get(user_id, []))


class FakeCompletionClient:
    """Returns queued responses in order; an Exception instance is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def complete(self, system, user, *, messages=None, max_tokens=1000, temperature=0, json_mode=False):
        self.calls.append({
            "system": system,
            "user": user,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        if not self.responses:
            raise UpstreamUnavailable("no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def test_config():
    return replace(
        personalization_config,
        completion_retry=RetryPolicy(max_attempts=2, base_delay=0, max_delay=0, timeout=1.0),
        store_retry=RetryPolicy(max_attempts=2, base_delay=0, max_delay=0),
    )


@pytest.fixture
def store():
    return FakeTripStore()


@pytest.fixture
def llm():
    return FakeCompletionClient()


@pytest.fixture
def service(store, llm, test_config):
    return PersonalizationService(
        store=store,
        completion_client=llm,
        cache=ProfileCache(),
        config=test_config,
        clock=lambda: TODAY,
    )
