from dataclasses import replace
from datetime import date

from conftest import TODAY, make_trip

from moodtrip.services.personalization.config import InsightParams, personalization_config
from moodtrip.services.personalization.insights import DEFAULT_SUGGESTIONS, InsightEngine
from moodtrip.services.personalization.profile_builder import ProfileBuilder

builder = ProfileBuilder()
engine = InsightEngine()


def test_cold_start_insights():
    insights = engine.generate(builder.default_profile("u1"), today=TODAY)

    assert insights.source == "heuristic"
    assert insights.mood_evolution is None
    assert insights.seasonal_predictions.current_season == "summer"
    assert insights.seasonal_predictions.prediction == ["adventure"]
    assert insights.seasonal_predictions.confidence == 0.3
    assert insights.destination_suggestions == [text for text, _ in DEFAULT_SUGGESTIONS]
    assert not any("you enjoyed" in text or "your love" in text for text in insights.destination_suggestions)
    assert insights.budget_trends.is_placeholder
    assert insights.timing_optimizations.best_months == ["April", "May", "September", "October"]


def test_single_trip_has_no_mood_trend():
    profile = builder.build("u1", [make_trip(mood="culture")])

    assert engine.mood_evolution(profile) is None


def test_mood_trend_uses_most_recent_entries():
    trips = [
        make_trip(mood="foodie"),
        make_trip(mood="culture"),
        make_trip(mood="nature"),
        make_trip(mood="adventure"),
    ]

    trend = engine.mood_evolution(builder.build("u1", trips))

    assert trend.trend == "foodie"
    assert trend.confidence == 0.8
    assert trend.recent_moods == ["foodie", "culture", "nature"]


def test_seasonal_prediction_from_recorded_moods():
    trips = [
        make_trip(start=date(2024, 7, 10), mood="relaxation"),
        make_trip(start=date(2023, 8, 1), mood="relaxation"),
        make_trip(start=date(2023, 6, 5), mood="nature"),
        make_trip(start=date(2023, 1, 5), mood="culture"),
    ]

    prediction = engine.seasonal_predictions(builder.build("u1", trips), TODAY)

    assert prediction.current_season == "summer"
    assert prediction.prediction == ["relaxation", "relaxation", "nature"]
    assert prediction.confidence == 0.7
    assert prediction.suggestion == "In summer you usually plan relaxation, nature trips"


def test_seasonal_prediction_for_other_season_is_low_confidence():
    trips = [make_trip(start=date(2024, 7, 10), mood="relaxation")]

    prediction = engine.seasonal_predictions(builder.build("u1", trips), date(2025, 1, 10))

    assert prediction.current_season == "winter"
    assert prediction.prediction == ["adventure"]
    assert prediction.confidence == 0.3


def test_destination_suggestions_skip_visited_countries():
    trips = [
        make_trip("Paris, France", mood="culture"),
        make_trip("Osaka, Japan", mood="foodie"),
    ]

    suggestions = engine.destination_suggestions(builder.build("u1", trips))

    assert suggestions[0] == "Since you enjoyed Paris, you might love Vienna, Austria"
    assert suggestions[1] == "Since you enjoyed Osaka, you might love Seoul, South Korea"
    # Kyoto, Japan for "culture" is skipped since Japan was visited
    assert suggestions[2] == "Based on your love for foodie, try Bangkok, Thailand"
    assert len(suggestions) == 3


def test_destination_suggestions_pad_with_defaults_without_duplicates():
    profile = builder.build("u1", [make_trip("Nice, France")])

    suggestions = engine.destination_suggestions(profile)

    assert suggestions == [
        "Since you enjoyed Nice, you might love Vienna, Austria",
        "Kyoto, Japan is a favorite for culture lovers",
        "New Zealand is a classic for adventurous travelers",
    ]


def test_destination_suggestions_may_run_short_for_well_traveled_users():
    trips = [
        make_trip("Queenstown, New Zealand"),
        make_trip("Kyoto, Japan"),
        make_trip("Salzburg, Austria"),
    ]

    suggestions = engine.destination_suggestions(builder.build("u1", trips))

    assert suggestions == ["Since you enjoyed Kyoto, you might love Seoul, South Korea"]


def test_insights_are_deterministic():
    profile = builder.build("u1", [make_trip("Lima, Peru", mood="adventure"), make_trip(mood="culture")])

    assert engine.generate(profile, today=TODAY) == engine.generate(profile, today=TODAY)


def test_injected_insight_params_are_used():
    config = replace(
        personalization_config,
        insights=InsightParams(seasonal_unknown_confidence=0.1, max_destination_suggestions=1, best_months=("June",)),
    )
    custom = InsightEngine(config)

    insights = custom.generate(builder.default_profile("u1"), today=TODAY)

    assert insights.seasonal_predictions.confidence == 0.1
    assert insights.destination_suggestions == ["Kyoto, Japan is a favorite for culture lovers"]
    assert insights.timing_optimizations.best_months == ["June"]
