"""Builds a TravelerProfile from raw trip records."""

import logging
import math
from collections.abc import Iterable, Sequence

from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.profile import (
    BehaviorPatterns,
    MoodEntry,
    Preferences,
    TravelerProfile,
    TravelHistory,
    TripRecord,
    season_for,
)

logger = logging.getLogger(__name__)


class ProfileBuilder:
    """Pure aggregation over a newest-first list of trip records.

    Building is deterministic: the same trips always produce an equal profile.
    """

    def __init__(self, config: PersonalizationConfig = personalization_config):
        self._cfg = config

    def build(
        self,
        user_id: str,
        trips: Sequence[TripRecord],
        ai_personality: str | None = None,
    ) -> TravelerProfile:
        return TravelerProfile(
            id=user_id,
            preferences=self._analyze_preferences(trips),
            travel_history=self._analyze_travel_history(trips),
            behavior_patterns=self._analyze_behavior_patterns(trips),
            ai_personality=ai_personality or self._cfg.defaults.ai_personality,
        )

    def default_profile(self, user_id: str) -> TravelerProfile:
        """Cold-start profile, also used when trip history cannot be read."""
        return self.build(user_id, [])

    # ---- Sections ----

    def _analyze_preferences(self, trips: Sequence[TripRecord]) -> Preferences:
        cfg = self._cfg
        destinations = [t.destination.strip() for t in trips if t.destination and t.destination.strip()]
        moods = [t.mood_tag for t in trips if t.mood_tag]
        budgets = _observed_budgets(trips)

        if budgets:
            budget_range = (min(budgets), max(budgets))
        else:
            budget_range = cfg.defaults.budget_range

        static = cfg.static_preferences
        return Preferences(
            favorite_destinations=_dedupe(destinations)[: cfg.limits.favorite_destinations],
            preferred_budget_range=budget_range,
            favorite_moods=_dedupe(moods)[: cfg.limits.favorite_moods],
            seasonal_patterns=self._extract_seasonal_patterns(trips),
            activity_preferences=static.activity_preferences,
            accommodation_style=static.accommodation_style,
            dining_preferences=static.dining_preferences,
            transport_preferences=static.transport_preferences,
        )

    def _analyze_travel_history(self, trips: Sequence[TripRecord]) -> TravelHistory:
        defaults = self._cfg.defaults
        countries = [c for c in (extract_country(t.destination) for t in trips) if c]
        durations = [self._trip_duration(t) for t in trips]
        budgets = _observed_budgets(trips)

        return TravelHistory(
            total_trips=len(trips),
            countries_visited=_dedupe(countries),
            average_trip_duration=_mean(durations, defaults.average_trip_duration),
            average_budget=_mean(budgets, defaults.average_budget),
            last_trip_date=trips[0].created_at.isoformat() if trips else None,
            mood_evolution=tuple(
                MoodEntry(
                    date=t.created_at.isoformat(),
                    mood=t.mood_tag or defaults.mood,
                    satisfaction=defaults.satisfaction,
                )
                for t in trips
            ),
        )

    def _analyze_behavior_patterns(self, trips: Sequence[TripRecord]) -> BehaviorPatterns:
        cfg = self._cfg
        # A comma in the destination ("City, Country") is treated as international
        has_international = any(t.destination and "," in t.destination for t in trips)

        return BehaviorPatterns(
            planning_style="detailed" if len(trips) >= cfg.limits.detailed_planner_min_trips else "flexible",
            risk_tolerance="high" if has_international else "medium",
            social_preference="group" if any((t.traveler_count or 1) > 1 for t in trips) else "solo",
            activity_level=cfg.static_preferences.activity_level,
            cultural_openness=8 if has_international else 6,
        )

    def _extract_seasonal_patterns(
        self,
        trips: Sequence[TripRecord],
    ) -> tuple[tuple[str, tuple[str, ...]], ...]:
        patterns: dict[str, list[str]] = {}
        for trip in trips:
            if trip.start_date is None:
                continue
            season = season_for(trip.start_date)
            patterns.setdefault(season, []).append(trip.mood_tag or self._cfg.defaults.mood)
        return tuple((season, tuple(moods)) for season, moods in patterns.items())

    def _trip_duration(self, trip: TripRecord) -> int:
        default = self._cfg.defaults.trip_duration
        if trip.start_date is None or trip.end_date is None:
            return default
        days = (trip.end_date - trip.start_date).days
        if days < 0:
            logger.debug(f"Trip ends before it starts ({trip.start_date} → {trip.end_date}), using default")
            return default
        return days


def extract_country(destination: str | None) -> str | None:
    """Best-effort country from "City, Country": text after the first comma."""
    if not destination or "," not in destination:
        return None
    country = destination.split(",", 1)[1].strip()
    return country or None


def _observed_budgets(trips: Iterable[TripRecord]) -> list[float]:
    budgets = []
    for t in trips:
        if t.budget is None:
            continue
        value = float(t.budget)
        if math.isfinite(value) and value > 0:
            budgets.append(value)
    return budgets


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(values))


def _mean(values: Sequence[float], default: float) -> float:
    if not values:
        return default
    return sum(values) / len(values)
