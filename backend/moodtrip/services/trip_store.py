"""Read-only access to a user's historical trips."""

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from moodtrip.models.trip import Trip
from moodtrip.services.personalization.exceptions import UpstreamUnavailable
from moodtrip.services.personalization.profile import TripRecord

logger = logging.getLogger(__name__)


class TripRecordStore(Protocol):
    async def list_trips(self, user_id: str) -> list[TripRecord]:
        """All trips for a user, newest first."""
        ...


class SqlTripRecordStore:
    """Reads the ``trips`` table through an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_trips(self, user_id: str) -> list[TripRecord]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Trip)
                    .where(Trip.user_id == user_id)
                    .order_by(Trip.created_at.desc())
                )
                trips = result.scalars().all()
        except SQLAlchemyError as e:
            raise UpstreamUnavailable(f"Trip store read failed for user {user_id}: {e}") from e

        logger.debug(f"Loaded {len(trips)} trips for user {user_id}")
        return [self._to_record(t) for t in trips]

    @staticmethod
    def _to_record(trip: Trip) -> TripRecord:
        return TripRecord(
            created_at=trip.created_at,
            destination=trip.destination,
            start_date=trip.start_date,
            end_date=trip.end_date,
            budget=float(trip.budget) if trip.budget is not None else None,
            traveler_count=trip.traveler_count or 1,
            mood_tag=trip.mood_tag,
        )
