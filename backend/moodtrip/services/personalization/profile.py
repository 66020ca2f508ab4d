"""Traveler profile data structures."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

from moodtrip.services.personalization.config import AI_PERSONALITIES


# ---------- Raw input ----------

@dataclass(frozen=True)
class TripRecord:
    """One historical trip as read from the trip record store."""
    created_at: datetime
    destination: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    budget: float | None = None
    traveler_count: int = 1
    mood_tag: str | None = None


# ---------- Profile ----------

@dataclass(frozen=True)
class MoodEntry:
    date: str  # ISO timestamp of the trip record
    mood: str
    satisfaction: float  # placeholder score, see ProfileDefaults.satisfaction


@dataclass(frozen=True)
class Preferences:
    favorite_destinations: tuple[str, ...]
    preferred_budget_range: tuple[float, float]
    favorite_moods: tuple[str, ...]
    # (season, moods) pairs in first-seen season order
    seasonal_patterns: tuple[tuple[str, tuple[str, ...]], ...]
    activity_preferences: tuple[str, ...]
    accommodation_style: str
    dining_preferences: tuple[str, ...]
    transport_preferences: tuple[str, ...]

    def moods_in_season(self, season: str) -> tuple[str, ...]:
        for name, moods in self.seasonal_patterns:
            if name == season:
                return moods
        return ()


@dataclass(frozen=True)
class TravelHistory:
    total_trips: int
    countries_visited: tuple[str, ...]
    average_trip_duration: float
    average_budget: float
    last_trip_date: str | None
    mood_evolution: tuple[MoodEntry, ...]


@dataclass(frozen=True)
class BehaviorPatterns:
    planning_style: str       # "detailed" | "flexible"
    risk_tolerance: str       # "high" | "medium"
    social_preference: str    # "group" | "solo"
    activity_level: str       # placeholder, always "moderate"
    cultural_openness: int    # 1-10 scale


@dataclass(frozen=True)
class TravelerProfile:
    """Behavioral profile derived from a user's trip history.

    Instances are never mutated; updates go through ``with_personality`` /
    ``with_observed_mood`` and replace the cache entry.
    """
    id: str
    preferences: Preferences
    travel_history: TravelHistory
    behavior_patterns: BehaviorPatterns
    ai_personality: str = "balanced"

    def with_personality(self, personality: str) -> "TravelerProfile":
        if personality not in AI_PERSONALITIES:
            raise ValueError(f"Unknown AI personality: {personality!r}")
        return replace(self, ai_personality=personality)

    def with_observed_mood(self, mood: str, cap: int) -> "TravelerProfile":
        """Append a newly observed mood to favorite_moods.

        Known moods and moods arriving once the list holds ``cap`` entries
        leave the profile unchanged.
        """
        moods = self.preferences.favorite_moods
        if not mood or mood in moods or len(moods) >= cap:
            return self
        return replace(self, preferences=replace(self.preferences, favorite_moods=moods + (mood,)))

    @property
    def is_cold_start(self) -> bool:
        return self.travel_history.total_trips == 0


# ---------- Situational context ----------

@dataclass(frozen=True)
class RecommendationContext:
    """Live situational inputs for one recommendation request."""
    current_season: str
    user_mood: str
    weather_conditions: Any = None
    local_events: list = field(default_factory=list)
    price_alerts: list = field(default_factory=list)
    group_dynamics: Any = None

    @classmethod
    def for_trip(cls, trip_details: dict | None, today: date | None = None) -> "RecommendationContext":
        """Default context for a trip request: today's season, the trip's mood."""
        return cls(
            current_season=season_for(today or date.today()),
            user_mood=selected_mood_id(trip_details) or "adventure",
        )


def season_for(day: date) -> str:
    """Northern-hemisphere meteorological season for a date."""
    month = day.month
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "autumn"
    return "winter"


def selected_mood_id(trip_details: dict | None) -> str | None:
    """Extract the mood id from trip details.

    Accepts ``{"selected_mood": {"id": "culture"}}``, ``{"selected_mood": "culture"}``
    or a ``mood`` key.
    """
    if not trip_details:
        return None
    mood = trip_details.get("selected_mood") or trip_details.get("mood")
    if isinstance(mood, dict):
        mood = mood.get("id")
    if isinstance(mood, str) and mood.strip():
        return mood.strip()
    return None
