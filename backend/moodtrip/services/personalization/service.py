"""Personalization service — wires store, cache, assembler and generators.

All collaborators are injected so each request path can be exercised with a
fresh cache and fake upstreams.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date

from moodtrip.schemas.personalization import (
    BudgetAllocation,
    ChatReply,
    PackingList,
    PredictiveInsights,
    RecommendationSet,
)
from moodtrip.services.personalization.budget_planner import BudgetPlanner
from moodtrip.services.personalization.completion import (
    CompletionClient,
    CompletionRunner,
    call_with_retry,
)
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.context_assembler import ContextAssembler, PromptContext
from moodtrip.services.personalization.exceptions import PersonalizationError
from moodtrip.services.personalization.fallbacks import fallback_chat_reply
from moodtrip.services.personalization.insights import InsightEngine
from moodtrip.services.personalization.packing_list import PackingListGenerator
from moodtrip.services.personalization.profile import (
    RecommendationContext,
    TravelerProfile,
    selected_mood_id,
)
from moodtrip.services.personalization.profile_builder import ProfileBuilder
from moodtrip.services.personalization.profile_cache import ProfileCache
from moodtrip.services.personalization.recommendations import RecommendationGenerator
from moodtrip.services.personalization.travel_buddy import TravelBuddy
from moodtrip.services.trip_store import TripRecordStore

logger = logging.getLogger(__name__)


class PersonalizationService:
    """Entry point for profile building and personalized artifacts.

    Generator methods never raise for upstream trouble: a failed or
    malformed completion yields the task's fallback (``source="fallback"``).
    """

    def __init__(
        self,
        store: TripRecordStore,
        completion_client: CompletionClient,
        cache: ProfileCache | None = None,
        config: PersonalizationConfig = personalization_config,
        clock: Callable[[], date] = date.today,
    ):
        self._store = store
        self._cache = cache if cache is not None else ProfileCache()
        self._config = config
        self._clock = clock

        self._builder = ProfileBuilder(config)
        self._assembler = ContextAssembler()
        self._insights = InsightEngine(config)

        runner = CompletionRunner(completion_client, config.completion_retry)
        self._recommendations = RecommendationGenerator(runner, config)
        self._budget = BudgetPlanner(runner, config)
        self._packing = PackingListGenerator(runner, config)
        self._buddy = TravelBuddy(runner, config)

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    # ---- Profiles ----

    async def build_profile(self, user_id: str) -> TravelerProfile:
        """Rebuild from trip history and overwrite the cache entry.

        Never raises: if the store cannot be read the default profile is
        returned (and cached) instead.
        """
        previous = self._cache.get(user_id)
        personality = previous.ai_personality if previous else self._config.defaults.ai_personality

        try:
            trips = await call_with_retry(
                lambda: self._store.list_trips(user_id),
                self._config.store_retry,
                "trip store read",
            )
        except PersonalizationError as e:
            logger.error(f"Error building profile for user {user_id}, using default: {e}")
            profile = replace(self._builder.default_profile(user_id), ai_personality=personality)
        else:
            profile = self._builder.build(user_id, trips, ai_personality=personality)
            logger.info(
                f"Built profile for user {user_id}: {profile.travel_history.total_trips} trips, "
                f"{len(profile.travel_history.countries_visited)} countries"
            )

        self._cache.put(user_id, profile)
        return profile

    async def get_profile(self, user_id: str) -> TravelerProfile:
        return await self._cache.get_or_build(user_id, self.build_profile)

    async def update_personality(self, user_id: str, personality: str) -> TravelerProfile:
        profile = await self.get_profile(user_id)
        updated = self._cache.update(user_id, lambda p: p.with_personality(personality))
        return updated if updated is not None else profile.with_personality(personality)

    # ---- Generators ----

    async def generate_recommendations(
        self,
        user_id: str,
        trip_details: dict | None = None,
        context: RecommendationContext | None = None,
    ) -> RecommendationSet:
        trip_details = trip_details or {}
        prompt_context = await self._prompt_context(
            user_id, context or RecommendationContext.for_trip(trip_details, today=self._clock()),
        )
        result = await self._recommendations.generate(prompt_context, trip_details)
        if result.source == "llm":
            self._learn_from_trip(user_id, trip_details)
        return result

    async def generate_budget_allocation(
        self,
        user_id: str,
        total_budget: float,
        trip_details: dict | None = None,
    ) -> BudgetAllocation:
        trip_details = trip_details or {}
        prompt_context = await self._prompt_context(user_id)
        return await self._budget.allocate(prompt_context, total_budget, trip_details)

    @staticmethod
    def rescale_budget(allocation: BudgetAllocation, total_budget: float) -> BudgetAllocation:
        """Keep the split, change the total. Raises ValueError for a negative total."""
        return allocation.rescale(total_budget)

    async def generate_packing_list(
        self,
        user_id: str,
        trip_details: dict | None = None,
        weather_data: object = None,
    ) -> PackingList:
        trip_details = trip_details or {}
        situation = replace(
            RecommendationContext.for_trip(trip_details, today=self._clock()),
            weather_conditions=weather_data,
        )
        prompt_context = await self._prompt_context(user_id, situation)
        return await self._packing.generate(prompt_context, trip_details, weather_data)

    async def chat(
        self,
        user_id: str | None,
        message: str,
        context: RecommendationContext | None = None,
    ) -> ChatReply:
        if not user_id:
            return fallback_chat_reply(signed_in=False)
        prompt_context = await self._prompt_context(user_id, context)
        return await self._buddy.reply(prompt_context, message)

    async def generate_predictive_insights(self, user_id: str) -> PredictiveInsights:
        profile = await self.get_profile(user_id)
        today = self._clock()
        try:
            return self._insights.generate(profile, today=today)
        except Exception as e:
            logger.error(f"Predictive insights failed for user {user_id}, using default profile: {e}")
            return self._insights.generate(self._builder.default_profile(user_id), today=today)

    # ---- Helpers ----

    async def _prompt_context(
        self,
        user_id: str,
        situation: RecommendationContext | None = None,
    ) -> PromptContext:
        profile = await self.get_profile(user_id)
        return self._assembler.assemble(profile, situation)

    def _learn_from_trip(self, user_id: str, trip_details: dict) -> None:
        mood = selected_mood_id(trip_details)
        if not mood:
            return
        cap = self._config.limits.favorite_moods
        self._cache.update(user_id, lambda p: p.with_observed_mood(mood, cap))
