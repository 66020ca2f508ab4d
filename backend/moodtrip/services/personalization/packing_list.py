"""Personalized packing list generator."""

import json
import logging

from moodtrip.schemas.personalization import PackingList
from moodtrip.services.personalization.completion import CompletionRunner
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.context_assembler import PromptContext
from moodtrip.services.personalization.fallbacks import fallback_packing_list
from moodtrip.services.personalization.profile import selected_mood_id

logger = logging.getLogger(__name__)

PACKING_SYSTEM_PROMPT = (
    "You are a personalized packing advisor who knows this traveler's habits. "
    "Respond ONLY with valid JSON, no markdown, no preamble."
)


class PackingListGenerator:
    def __init__(self, runner: CompletionRunner, config: PersonalizationConfig = personalization_config):
        self._runner = runner
        self._cfg = config

    async def generate(self, context: PromptContext, trip_details: dict, weather: object = None) -> PackingList:
        try:
            return await self._runner.structured(
                system=PACKING_SYSTEM_PROMPT,
                instruction=self._build_instruction(context, trip_details, weather),
                params=self._cfg.llm.packing,
                schema=PackingList,
                label="packing list",
            )
        except Exception as e:
            logger.warning(f"Packing list failed for user {context.user_id}, using fallback: {e}")
        return fallback_packing_list(trip_details, weather)

    @staticmethod
    def _build_instruction(context: PromptContext, trip_details: dict, weather: object) -> str:
        destination = trip_details.get("destination", "unknown destination")
        start = trip_details.get("start_date", "?")
        end = trip_details.get("end_date", "?")
        mood = selected_mood_id(trip_details) or "not specified"
        weather_str = json.dumps(weather, sort_keys=True, default=str) if weather else "unknown"

        return f"""Create a personalized packing list for this traveler:

Trip: {destination}, {start} to {end}
Mood: {mood}
Weather: {weather_str}

User Profile:
- Activity level: {context.activity_level}
- Risk tolerance: {context.risk_tolerance}
- Past destinations: {context.past_countries}
- Preferred activities: {context.activity_preferences}

Respond ONLY with valid JSON, categories mapping to items with personalized reasons:
{{
  "categories": {{
    "essentials": [{{"item": "Passport", "reason": "Required for international travel"}}],
    "clothing": [{{"item": "Waterproof jacket", "reason": "Based on weather forecast"}}],
    "electronics": [{{"item": "Portable charger", "reason": "For your active travel style"}}],
    "personal_items": [{{"item": "Travel pillow", "reason": "You prefer comfort on long trips"}}],
    "activity_specific": [{{"item": "Hiking boots", "reason": "Perfect for your adventure mood"}}]
  }},
  "personalized_tips": ["Pack light - you tend to buy souvenirs"]
}}"""
