"""Predictive insights — local heuristics over the profile, no completion call.

Several fields are placeholders until real signal exists: the budget trend is
fixed, and mood confidence values are constants.
"""

from datetime import date

from moodtrip.schemas.personalization import (
    BudgetTrend,
    MoodTrend,
    PredictiveInsights,
    SeasonalPrediction,
    TimingOptimization,
)
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.profile import TravelerProfile, season_for
from moodtrip.services.personalization.profile_builder import extract_country

# Visited country → a destination with a similar feel
RELATED_DESTINATIONS: dict[str, str] = {
    "france": "Vienna, Austria",
    "italy": "Porto, Portugal",
    "spain": "Lisbon, Portugal",
    "portugal": "Seville, Spain",
    "japan": "Seoul, South Korea",
    "thailand": "Hoi An, Vietnam",
    "indonesia": "Palawan, Philippines",
    "mexico": "Cartagena, Colombia",
    "usa": "Vancouver, Canada",
    "united states": "Vancouver, Canada",
    "uk": "Edinburgh, Scotland",
    "united kingdom": "Dublin, Ireland",
    "greece": "Dubrovnik, Croatia",
    "iceland": "Tromsø, Norway",
    "peru": "La Paz, Bolivia",
    "morocco": "Cairo, Egypt",
}

# Mood tag → destination that suits it
MOOD_DESTINATIONS: dict[str, str] = {
    "adventure": "Queenstown, New Zealand",
    "relaxation": "Maldives",
    "culture": "Kyoto, Japan",
    "foodie": "Bangkok, Thailand",
    "nature": "Banff, Canada",
    "romantic": "Santorini, Greece",
    "budget": "Hanoi, Vietnam",
    "luxury": "Dubai, UAE",
    "spontaneous": "Lisbon, Portugal",
}

# (suggestion, place) used to pad thin profiles
DEFAULT_SUGGESTIONS: tuple[tuple[str, str], ...] = (
    ("Kyoto, Japan is a favorite for culture lovers", "Kyoto, Japan"),
    ("Vienna, Austria pairs grand museums with café culture", "Vienna, Austria"),
    ("New Zealand is a classic for adventurous travelers", "New Zealand"),
)


class InsightEngine:
    """Builds PredictiveInsights from a cached profile."""

    def __init__(self, config: PersonalizationConfig = personalization_config):
        self._cfg = config.insights

    def generate(self, profile: TravelerProfile, today: date | None = None) -> PredictiveInsights:
        today = today or date.today()
        return PredictiveInsights(
            mood_evolution=self.mood_evolution(profile),
            seasonal_predictions=self.seasonal_predictions(profile, today),
            budget_trends=self.budget_trends(profile),
            destination_suggestions=self.destination_suggestions(profile),
            timing_optimizations=self.timing_optimizations(profile),
            source="heuristic",
        )

    def mood_evolution(self, profile: TravelerProfile) -> MoodTrend | None:
        evolution = profile.travel_history.mood_evolution
        if len(evolution) < self._cfg.mood_trend_min_entries:
            return None

        recent = evolution[: self._cfg.mood_trend_window]
        trend = recent[0].mood
        return MoodTrend(
            trend=trend,
            confidence=self._cfg.mood_trend_confidence,
            insight=f"You've been gravitating toward {trend} experiences lately",
            recent_moods=[entry.mood for entry in recent],
        )

    def seasonal_predictions(self, profile: TravelerProfile, today: date) -> SeasonalPrediction:
        season = season_for(today)
        recorded = list(profile.preferences.moods_in_season(season))

        if recorded:
            # prediction keeps one entry per trip; the sentence names each mood once
            moods = list(dict.fromkeys(recorded))
            return SeasonalPrediction(
                current_season=season,
                prediction=recorded,
                confidence=self._cfg.seasonal_known_confidence,
                suggestion=f"In {season} you usually plan {', '.join(moods)} trips",
            )
        return SeasonalPrediction(
            current_season=season,
            prediction=["adventure"],
            confidence=self._cfg.seasonal_unknown_confidence,
            suggestion=f"No {season} trips yet. An adventure could be a great start",
        )

    def budget_trends(self, profile: TravelerProfile) -> BudgetTrend:
        return BudgetTrend(
            trend=self._cfg.budget_trend,
            average_growth=self._cfg.budget_average_growth,
            insight=(
                "Your travel budgets have been increasing, suggesting growing "
                "confidence in premium experiences"
            ),
            is_placeholder=True,
        )

    def destination_suggestions(self, profile: TravelerProfile) -> list[str]:
        limit = self._cfg.max_destination_suggestions
        visited = {c.lower() for c in profile.travel_history.countries_visited}
        suggestions: list[str] = []
        suggested_places: set[str] = set()

        def _add(text: str, place: str) -> None:
            if len(suggestions) >= limit or place in suggested_places:
                return
            place_country = extract_country(place) or place
            if place_country.lower() in visited:
                return
            suggested_places.add(place)
            suggestions.append(text)

        for destination in profile.preferences.favorite_destinations:
            country = extract_country(destination)
            related = RELATED_DESTINATIONS.get(country.lower()) if country else None
            if related:
                city = destination.split(",", 1)[0].strip()
                _add(f"Since you enjoyed {city}, you might love {related}", related)

        for mood in profile.preferences.favorite_moods:
            place = MOOD_DESTINATIONS.get(mood)
            if place:
                _add(f"Based on your love for {mood}, try {place}", place)

        for text, place in DEFAULT_SUGGESTIONS:
            _add(text, place)

        return suggestions

    def timing_optimizations(self, profile: TravelerProfile) -> TimingOptimization:
        return TimingOptimization(
            best_months=list(self._cfg.best_months),
            reasoning="Based on your preference for mild weather and cultural activities",
            price_optimization="Travel in shoulder seasons for 30% savings",
        )
