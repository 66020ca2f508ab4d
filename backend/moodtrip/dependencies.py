"""FastAPI dependencies."""

from functools import lru_cache

from moodtrip.database import async_session_factory
from moodtrip.services.llm_client import llm_client
from moodtrip.services.personalization.service import PersonalizationService
from moodtrip.services.trip_store import SqlTripRecordStore


@lru_cache
def get_personalization_service() -> PersonalizationService:
    """Process-wide service; its ProfileCache lives as long as the process."""
    return PersonalizationService(
        store=SqlTripRecordStore(async_session_factory),
        completion_client=llm_client,
    )
