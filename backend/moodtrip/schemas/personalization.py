"""Typed shapes for generated artifacts and personalization requests.

Completion output is validated against these models at the boundary; a
violation is a MalformedResponse and takes the fallback path. Models accept
both snake_case and camelCase keys since models answer in either.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel, to_snake

from moodtrip.services.personalization.config import personalization_config

Source = Literal["llm", "fallback", "heuristic"]


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _lift_categories(data: Any, reserved: set[str]) -> Any:
    """Accept the flat shape {"essentials": [...], "personalizedTips": [...]}
    by moving non-reserved keys under "categories"."""
    if not isinstance(data, dict) or "categories" in data:
        return data
    reserved_all = reserved | {to_camel(k) for k in reserved}
    categories = {k: v for k, v in data.items() if k not in reserved_all}
    rest = {k: v for k, v in data.items() if k in reserved_all}
    return {**rest, "categories": categories}


# ---------- Personalized recommendations ----------

class RecommendationSet(_Payload):
    hidden_gems: list[str] = Field(min_length=1)
    budget_tips: list[str] = Field(min_length=1)
    timing_advice: str = Field(min_length=1)
    packing_list: list[str] = Field(default_factory=list)
    personalized_note: str = ""
    source: Source = "llm"


# ---------- Budget allocation ----------

class BudgetCategory(_Payload):
    amount: float = Field(default=0, ge=0)
    percentage: float = Field(ge=0, le=100)
    reasoning: str = ""


class BudgetAllocationResponse(_Payload):
    """What the model is asked to return; amounts are recomputed locally."""
    categories: dict[str, BudgetCategory] = Field(min_length=1)
    personalized_tips: list[str] = Field(default_factory=list)
    budget_optimizations: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flat_shape(cls, data: Any) -> Any:
        return _lift_categories(data, {"personalized_tips", "budget_optimizations", "total_budget"})


class BudgetAllocation(_Payload):
    """Budget split whose amounts always equal percentage/100 × total_budget."""
    total_budget: float = Field(ge=0)
    categories: dict[str, BudgetCategory] = Field(min_length=1)
    personalized_tips: list[str] = Field(default_factory=list)
    budget_optimizations: list[str] = Field(default_factory=list)
    source: Source = "llm"

    @model_validator(mode="after")
    def _percentages_fit(self) -> "BudgetAllocation":
        tolerance = personalization_config.budget.percentage_tolerance
        if self.percentage_total > 100 + tolerance:
            raise ValueError(f"Category percentages sum to {self.percentage_total:.1f}%, over 100%")
        return self

    @property
    def percentage_total(self) -> float:
        return sum(c.percentage for c in self.categories.values())

    @property
    def allocated_total(self) -> float:
        return round(sum(c.amount for c in self.categories.values()), 2)

    @classmethod
    def from_percentages(
        cls,
        total_budget: float,
        categories: dict[str, BudgetCategory],
        personalized_tips: list[str] | None = None,
        budget_optimizations: list[str] | None = None,
        source: Source = "llm",
        tolerance: float | None = None,
    ) -> "BudgetAllocation":
        """Recompute every amount from its percentage of ``total_budget``.

        A split up to ``tolerance`` points over 100% is scaled back to exactly
        100%; anything beyond that raises ValueError. Amounts never sum to more
        than the total.
        """
        if total_budget < 0:
            raise ValueError("Total budget cannot be negative")
        if tolerance is None:
            tolerance = personalization_config.budget.percentage_tolerance

        percentage_total = sum(c.percentage for c in categories.values())
        if percentage_total > 100 + tolerance:
            raise ValueError(f"Category percentages sum to {percentage_total:.1f}%, over 100%")
        scale = 100 / percentage_total if percentage_total > 100 else 1.0
        percentages = {name: c.percentage * scale for name, c in categories.items()}
        amounts = _split_amounts(percentages, total_budget)

        return cls(
            total_budget=total_budget,
            categories={
                name: BudgetCategory(
                    amount=amounts[name],
                    percentage=percentages[name],
                    reasoning=c.reasoning,
                )
                for name, c in categories.items()
            },
            personalized_tips=list(personalized_tips or []),
            budget_optimizations=list(budget_optimizations or []),
            source=source,
        )

    def rescale(self, total_budget: float) -> "BudgetAllocation":
        """Same percentages against a new total; amounts scale proportionally."""
        return self.from_percentages(
            total_budget,
            self.categories,
            self.personalized_tips,
            self.budget_optimizations,
            self.source,
        )


def _split_amounts(percentages: dict[str, float], total_budget: float) -> dict[str, float]:
    amounts = {name: round(max(0.0, pct / 100 * total_budget), 2) for name, pct in percentages.items()}
    # Per-category cent rounding can overshoot; take it off the largest share
    excess = round(sum(amounts.values()) - total_budget, 2)
    if excess > 0 and amounts:
        largest = max(amounts, key=amounts.get)
        amounts[largest] = round(max(0.0, amounts[largest] - excess), 2)
    return amounts


# ---------- Packing list ----------

class PackingItem(_Payload):
    item: str = Field(min_length=1)
    reason: str = ""


class PackingList(_Payload):
    categories: dict[str, list[PackingItem]] = Field(min_length=1)
    personalized_tips: list[str] = Field(default_factory=list)
    source: Source = "llm"

    @model_validator(mode="before")
    @classmethod
    def _flat_shape(cls, data: Any) -> Any:
        return _lift_categories(data, {"personalized_tips", "source"})

    @field_validator("categories")
    @classmethod
    def _snake_case_names(cls, value: dict[str, list[PackingItem]]) -> dict[str, list[PackingItem]]:
        if not any(value.values()):
            raise ValueError("Packing list has no items")
        return {to_snake(name): items for name, items in value.items()}

    @property
    def item_count(self) -> int:
        return sum(len(items) for items in self.categories.values())


# ---------- Conversational reply ----------

class ChatReply(BaseModel):
    reply: str
    source: Source = "llm"


# ---------- Predictive insights ----------

class MoodTrend(BaseModel):
    trend: str
    confidence: float
    insight: str
    recent_moods: list[str]


class SeasonalPrediction(BaseModel):
    current_season: str
    prediction: list[str]
    confidence: float
    suggestion: str


class BudgetTrend(BaseModel):
    trend: str
    average_growth: float
    insight: str
    is_placeholder: bool = True


class TimingOptimization(BaseModel):
    best_months: list[str]
    reasoning: str
    price_optimization: str


class PredictiveInsights(BaseModel):
    mood_evolution: MoodTrend | None
    seasonal_predictions: SeasonalPrediction
    budget_trends: BudgetTrend
    destination_suggestions: list[str] = Field(max_length=3)
    timing_optimizations: TimingOptimization
    source: Source = "heuristic"


# ---------- Requests ----------

class SituationIn(BaseModel):
    current_season: str | None = None
    weather_conditions: Any = None
    local_events: list = Field(default_factory=list)
    price_alerts: list = Field(default_factory=list)
    user_mood: str | None = None
    group_dynamics: Any = None


class RecommendationRequest(BaseModel):
    trip_details: dict = Field(default_factory=dict)
    context: SituationIn | None = None


class BudgetRequest(BaseModel):
    total_budget: float = Field(ge=0)
    trip_details: dict = Field(default_factory=dict)


class RescaleRequest(BaseModel):
    allocation: BudgetAllocation
    total_budget: float = Field(ge=0)


class PackingRequest(BaseModel):
    trip_details: dict = Field(default_factory=dict)
    weather: Any = None


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    context: SituationIn | None = None


class PersonalityRequest(BaseModel):
    personality: Literal["adventurous", "careful", "spontaneous", "balanced"]
