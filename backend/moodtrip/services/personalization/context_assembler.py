"""Context assembler — normalizes a profile plus live situation into prompt context."""

import json
import logging
from dataclasses import dataclass, replace

from moodtrip.services.personalization.profile import RecommendationContext, TravelerProfile

logger = logging.getLogger(__name__)


PERSONALITY_TRAITS: dict[str, str] = {
    "adventurous": (
        "- Push boundaries and suggest thrilling experiences\n"
        "- Encourage trying new things\n"
        "- Focus on unique, off-the-beaten-path activities\n"
        "- Be enthusiastic about challenges"
    ),
    "careful": (
        "- Prioritize safety and well-researched options\n"
        "- Suggest backup plans\n"
        "- Focus on reliable, well-reviewed experiences\n"
        "- Provide detailed preparation tips"
    ),
    "spontaneous": (
        "- Embrace uncertainty and surprise elements\n"
        "- Suggest flexible itineraries\n"
        "- Encourage last-minute discoveries\n"
        "- Be playful and unpredictable"
    ),
    "balanced": (
        "- Mix planned activities with spontaneous moments\n"
        "- Consider both comfort and adventure\n"
        "- Provide options for different energy levels\n"
        "- Be supportive and adaptable"
    ),
}


def personality_traits(personality: str | None) -> str:
    """Behavioral directives for a personality; unknown names get "balanced"."""
    return PERSONALITY_TRAITS.get(personality or "", PERSONALITY_TRAITS["balanced"])


# ---------- Data structures ----------

@dataclass(frozen=True)
class PromptContext:
    """Normalized fields every generator formats its instruction from."""
    user_id: str
    personality: str
    personality_traits: str

    # Profile summary
    total_trips: int
    countries_visited_count: int
    experience_summary: str
    favorite_destinations: str
    past_countries: str
    favorite_moods: str
    budget_range: str
    average_budget: float
    average_trip_duration: float
    planning_style: str
    activity_level: str
    risk_tolerance: str
    social_preference: str
    accommodation_style: str
    activity_preferences: str

    # Situation
    season: str | None = None
    weather: str | None = None
    user_mood: str | None = None
    local_events: str | None = None
    group_dynamics: str | None = None

    def profile_lines(self) -> list[str]:
        return [
            f"- Travel experience: {self.experience_summary}",
            f"- Favorite destinations: {self.favorite_destinations}",
            f"- Favorite moods: {self.favorite_moods}",
            f"- Budget range: {self.budget_range} (average ${self.average_budget:.0f})",
            f"- Typical trip length: {self.average_trip_duration:.0f} days",
            f"- Planning style: {self.planning_style}",
            f"- Activity level: {self.activity_level}",
            f"- Risk tolerance: {self.risk_tolerance}",
            f"- Travels: {self.social_preference}",
        ]

    def situation_lines(self) -> list[str]:
        lines = []
        if self.season:
            lines.append(f"- Season: {self.season}")
        if self.weather:
            lines.append(f"- Weather: {self.weather}")
        if self.user_mood:
            lines.append(f"- User mood: {self.user_mood}")
        if self.local_events:
            lines.append(f"- Local events: {self.local_events}")
        if self.group_dynamics:
            lines.append(f"- Group: {self.group_dynamics}")
        return lines

    def render(self, guide: str = "") -> str:
        """Full system context: guide, profile, situation, personality."""
        sections = []
        if guide:
            sections.extend([guide.strip(), "", "---", ""])
        sections.append(f"You are an AI travel buddy. Personality: {self.personality}.")
        sections.append("")
        sections.append("TRAVELER PROFILE:")
        sections.extend(self.profile_lines())
        situation = self.situation_lines()
        if situation:
            sections.append("")
            sections.append("CURRENT CONTEXT:")
            sections.extend(situation)
        sections.append("")
        sections.append("PERSONALITY TRAITS:")
        sections.append(self.personality_traits)
        return "\n".join(sections)


# ---------- Assembler ----------

class ContextAssembler:
    """Pure, total mapping from (profile, situation) to PromptContext."""

    def assemble(
        self,
        profile: TravelerProfile,
        situation: RecommendationContext | None = None,
    ) -> PromptContext:
        prefs = profile.preferences
        history = profile.travel_history
        behavior = profile.behavior_patterns
        low, high = prefs.preferred_budget_range

        ctx = PromptContext(
            user_id=profile.id,
            personality=profile.ai_personality if profile.ai_personality in PERSONALITY_TRAITS else "balanced",
            personality_traits=personality_traits(profile.ai_personality),
            total_trips=history.total_trips,
            countries_visited_count=len(history.countries_visited),
            experience_summary=_experience_summary(history.total_trips, len(history.countries_visited)),
            favorite_destinations=_join(prefs.favorite_destinations),
            past_countries=_join(history.countries_visited[:5]),
            favorite_moods=_join(prefs.favorite_moods),
            budget_range=f"${low:.0f}-${high:.0f}",
            average_budget=history.average_budget,
            average_trip_duration=history.average_trip_duration,
            planning_style=behavior.planning_style,
            activity_level=behavior.activity_level,
            risk_tolerance=behavior.risk_tolerance,
            social_preference=behavior.social_preference,
            accommodation_style=prefs.accommodation_style,
            activity_preferences=_join(prefs.activity_preferences),
        )
        if situation is None:
            return ctx

        events = None
        if situation.local_events:
            events = _join([str(e) for e in situation.local_events[:3]])

        return replace(
            ctx,
            season=situation.current_season,
            weather=_opaque_to_text(situation.weather_conditions),
            user_mood=situation.user_mood,
            local_events=events,
            group_dynamics=_opaque_to_text(situation.group_dynamics),
        )


def _experience_summary(total_trips: int, countries: int) -> str:
    if total_trips == 0:
        return "new traveler, no trips planned yet"
    trip_word = "trip" if total_trips == 1 else "trips"
    country_word = "country" if countries == 1 else "countries"
    return f"{total_trips} {trip_word} to {countries} {country_word}"


def _join(values) -> str:
    return ", ".join(values) if values else "none yet"


def _opaque_to_text(value) -> str | None:
    """Render opaque upstream data (weather, group info) for a prompt."""
    if value is None or value == {} or value == []:
        return None
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, sort_keys=True, default=str)
    except (TypeError, ValueError):
        logger.debug(f"Could not serialize context value of type {type(value).__name__}")
        return str(value)
