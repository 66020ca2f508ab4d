"""Personalization engine configuration — single source for defaults and limits."""

from dataclasses import dataclass, field

from moodtrip.config import settings


@dataclass(frozen=True)
class ProfileDefaults:
    """Values a profile falls back to when trip history is missing."""
    average_budget: float = 2000.0
    average_trip_duration: float = 7.0    # days
    trip_duration: int = 7                 # per trip, when a date is missing
    budget_range: tuple[float, float] = (1000.0, 5000.0)
    mood: str = "adventure"                # recorded for untagged trips
    ai_personality: str = "balanced"
    # Placeholder until real post-trip feedback is captured
    satisfaction: float = 4.5


@dataclass(frozen=True)
class ProfileLimits:
    """Caps on profile collections."""
    favorite_destinations: int = 10
    favorite_moods: int = 5
    detailed_planner_min_trips: int = 6   # more than 5 trips -> "detailed"


@dataclass(frozen=True)
class StaticPreferences:
    """Preference fields not yet inferred from trip data."""
    activity_preferences: tuple[str, ...] = ("sightseeing", "dining", "culture")
    accommodation_style: str = "mid-range"
    dining_preferences: tuple[str, ...] = ("local cuisine", "street food")
    transport_preferences: tuple[str, ...] = ("walking", "public transport")
    activity_level: str = "moderate"


@dataclass(frozen=True)
class TaskParams:
    """Sampling parameters for one completion task."""
    temperature: float
    max_tokens: int
    json_mode: bool = True


@dataclass(frozen=True)
class LLMTasks:
    """Per-task completion parameters."""
    recommendations: TaskParams = TaskParams(temperature=0.7, max_tokens=2000)
    budget: TaskParams = TaskParams(temperature=0.6, max_tokens=1000)
    packing: TaskParams = TaskParams(temperature=0.7, max_tokens=1500)
    chat: TaskParams = TaskParams(temperature=0.8, max_tokens=500, json_mode=False)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for upstream calls."""
    max_attempts: int = 3
    base_delay: float = 1.0     # seconds; doubles per attempt
    max_delay: float = 8.0
    timeout: float | None = None  # per-attempt deadline; None = no deadline


@dataclass(frozen=True)
class InsightParams:
    """Confidence values and limits for local predictive insights."""
    mood_trend_window: int = 3
    mood_trend_min_entries: int = 2
    mood_trend_confidence: float = 0.8
    seasonal_known_confidence: float = 0.7
    seasonal_unknown_confidence: float = 0.3
    max_destination_suggestions: int = 3
    # Placeholder: no budget-over-time signal is computed yet
    budget_trend: str = "increasing"
    budget_average_growth: int = 15
    best_months: tuple[str, ...] = ("April", "May", "September", "October")


@dataclass(frozen=True)
class BudgetRules:
    """Validation tolerance for generated budget splits."""
    percentage_tolerance: float = 0.5


@dataclass(frozen=True)
class PersonalizationConfig:
    """Top-level config aggregating all sub-configs."""
    defaults: ProfileDefaults = field(default_factory=ProfileDefaults)
    limits: ProfileLimits = field(default_factory=ProfileLimits)
    static_preferences: StaticPreferences = field(default_factory=StaticPreferences)
    llm: LLMTasks = field(default_factory=LLMTasks)
    completion_retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(
        max_attempts=settings.llm_max_attempts,
        base_delay=settings.llm_retry_base_delay,
        timeout=settings.llm_timeout_seconds,
    ))
    store_retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(
        max_attempts=settings.store_max_attempts,
        base_delay=settings.store_retry_base_delay,
    ))
    insights: InsightParams = field(default_factory=InsightParams)
    budget: BudgetRules = field(default_factory=BudgetRules)


AI_PERSONALITIES = ("adventurous", "careful", "spontaneous", "balanced")

# Singleton, import this everywhere
personalization_config = PersonalizationConfig()
