"""Smart budget allocation — splits a trip budget into spending categories.

The model proposes percentages and reasoning; amounts are always recomputed
locally as percentage/100 × total so a later rescale keeps the split.
"""

import logging

from moodtrip.schemas.personalization import BudgetAllocation, BudgetAllocationResponse
from moodtrip.services.personalization.completion import CompletionRunner
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.context_assembler import PromptContext
from moodtrip.services.personalization.exceptions import MalformedResponse
from moodtrip.services.personalization.fallbacks import fallback_budget_allocation

logger = logging.getLogger(__name__)

BUDGET_SYSTEM_PROMPT = (
    "You are a financial travel advisor. Provide practical, personalized budget advice. "
    "Respond ONLY with valid JSON, no markdown, no preamble."
)


class BudgetPlanner:
    """Budget split generator with a fixed 40/30/20/10 fallback."""

    def __init__(self, runner: CompletionRunner, config: PersonalizationConfig = personalization_config):
        self._runner = runner
        self._cfg = config

    async def allocate(
        self,
        context: PromptContext,
        total_budget: float,
        trip_details: dict,
    ) -> BudgetAllocation:
        if total_budget < 0:
            raise ValueError("Total budget cannot be negative")

        try:
            response = await self._runner.structured(
                system=BUDGET_SYSTEM_PROMPT,
                instruction=self._build_instruction(context, total_budget, trip_details),
                params=self._cfg.llm.budget,
                schema=BudgetAllocationResponse,
                label="budget allocation",
            )
            return self._to_allocation(response, total_budget)
        except Exception as e:
            logger.warning(f"Budget allocation failed for user {context.user_id}, using fallback: {e}")
        return fallback_budget_allocation(total_budget)

    def _to_allocation(self, response: BudgetAllocationResponse, total_budget: float) -> BudgetAllocation:
        try:
            return BudgetAllocation.from_percentages(
                total_budget,
                response.categories,
                response.personalized_tips,
                response.budget_optimizations,
                source="llm",
                tolerance=self._cfg.budget.percentage_tolerance,
            )
        except ValueError as e:
            # Percentages over 100% plus tolerance
            raise MalformedResponse(f"Budget split rejected: {e}") from e

    @staticmethod
    def _build_instruction(context: PromptContext, total_budget: float, trip_details: dict) -> str:
        destination = trip_details.get("destination") or "their next"
        return f"""Based on this user's travel history and preferences, allocate a ${total_budget:.0f} budget for their {destination} trip.

User spending patterns:
- Average budget: ${context.average_budget:.0f}
- Budget range: {context.budget_range}
- Preferred moods: {context.favorite_moods}
- Activity level: {context.activity_level}
- Accommodation style: {context.accommodation_style}
- Travels: {context.social_preference}

Percentages must be whole numbers that sum to 100. Amounts are percentage/100 × total.

Respond ONLY with valid JSON:
{{
  "categories": {{
    "accommodation": {{"amount": 400, "percentage": 40, "reasoning": "..."}},
    "food": {{"amount": 300, "percentage": 30, "reasoning": "..."}},
    "activities": {{"amount": 200, "percentage": 20, "reasoning": "..."}},
    "transport": {{"amount": 100, "percentage": 10, "reasoning": "..."}}
  }},
  "personalized_tips": ["Tip 1", "Tip 2"],
  "budget_optimizations": ["Save money by...", "Splurge on..."]
}}"""
