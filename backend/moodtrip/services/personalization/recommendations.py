"""Personalized recommendations — hidden gems, budget tips and timing advice."""

import json
import logging

from moodtrip.schemas.personalization import RecommendationSet
from moodtrip.services.personalization.completion import CompletionRunner
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.context_assembler import PromptContext
from moodtrip.services.personalization.fallbacks import fallback_recommendations
from moodtrip.services.personalization.prompts import load_prompt

logger = logging.getLogger(__name__)

_GUIDE = load_prompt("travel_buddy_guide.md")


class RecommendationGenerator:
    """One completion call; static starter tips when it fails."""

    def __init__(self, runner: CompletionRunner, config: PersonalizationConfig = personalization_config):
        self._runner = runner
        self._cfg = config

    async def generate(self, context: PromptContext, trip_details: dict) -> RecommendationSet:
        try:
            return await self._runner.structured(
                system=self._build_system_prompt(context),
                instruction=self._build_instruction(trip_details),
                params=self._cfg.llm.recommendations,
                schema=RecommendationSet,
                label="recommendations",
            )
        except Exception as e:
            logger.warning(f"Recommendations failed for user {context.user_id}, using fallback: {e}")
        return fallback_recommendations(trip_details)

    @staticmethod
    def _build_system_prompt(context: PromptContext) -> str:
        return (
            f"{context.render(_GUIDE)}\n\n"
            "Always explain your reasoning and reference their travel history "
            "when making suggestions."
        )

    @staticmethod
    def _build_instruction(trip_details: dict) -> str:
        return f"""Create personalized recommendations for this trip:
{json.dumps(trip_details, sort_keys=True, default=str)}

Respond ONLY with valid JSON:
{{
  "hidden_gems": ["place or experience most visitors miss", "..."],
  "budget_tips": ["specific way to save on this trip", "..."],
  "timing_advice": "when to go or when to do things, one or two sentences",
  "packing_list": ["item", "..."],
  "personalized_note": "one sentence tying this to their history"
}}"""
