"""Deterministic fallback artifacts, computed locally with no network call.

Each function returns a complete, valid result of its task's schema so the
UI always has something to show when the completion path fails.
"""

from moodtrip.schemas.personalization import (
    BudgetAllocation,
    BudgetCategory,
    ChatReply,
    PackingItem,
    PackingList,
    RecommendationSet,
)

FALLBACK_BUDGET_SPLIT: dict[str, tuple[float, str]] = {
    "accommodation": (40, "Standard allocation for comfortable stays"),
    "food": (30, "Balanced dining experiences"),
    "activities": (20, "Mix of paid attractions and free exploration"),
    "transport": (10, "Local transportation and transfers"),
}

CHAT_TECHNICAL_DIFFICULTIES = (
    "I'm experiencing some technical difficulties. Let me help you in a different way!"
)
CHAT_SIGN_IN_REQUIRED = "Please sign in to chat with your AI travel buddy!"
CHAT_UNCLEAR = "I'm having trouble understanding. Could you rephrase that?"


def fallback_recommendations(trip_details: dict | None = None) -> RecommendationSet:
    return RecommendationSet(
        hidden_gems=["Local market exploration", "Neighborhood walking tour"],
        budget_tips=["Book accommodations early", "Try street food"],
        packing_list=["Comfortable walking shoes", "Weather-appropriate clothing"],
        timing_advice="Best time to visit is during shoulder season",
        personalized_note="Based on popular traveler preferences",
        source="fallback",
    )


def fallback_budget_allocation(total_budget: float) -> BudgetAllocation:
    return BudgetAllocation.from_percentages(
        total_budget,
        {
            name: BudgetCategory(amount=0, percentage=pct, reasoning=reasoning)
            for name, (pct, reasoning) in FALLBACK_BUDGET_SPLIT.items()
        },
        personalized_tips=["Book accommodations early for better rates"],
        budget_optimizations=["Consider staying slightly outside city center"],
        source="fallback",
    )


def fallback_packing_list(trip_details: dict | None = None, weather: object = None) -> PackingList:
    return PackingList(
        categories={
            "essentials": [PackingItem(item="Passport", reason="Required for travel")],
            "clothing": [PackingItem(item="Comfortable walking shoes", reason="Essential for exploration")],
            "electronics": [PackingItem(item="Phone charger", reason="Stay connected")],
            "personal_items": [PackingItem(item="Sunscreen", reason="Protect from sun exposure")],
        },
        personalized_tips=["Pack light and leave room for souvenirs"],
        source="fallback",
    )


def fallback_chat_reply(signed_in: bool) -> ChatReply:
    if not signed_in:
        return ChatReply(reply=CHAT_SIGN_IN_REQUIRED, source="fallback")
    return ChatReply(reply=CHAT_TECHNICAL_DIFFICULTIES, source="fallback")
