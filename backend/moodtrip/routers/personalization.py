"""Personalization endpoints: profile, recommendations, budget, packing, chat, insights."""

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from moodtrip.dependencies import get_personalization_service
from moodtrip.schemas.personalization import (
    BudgetRequest,
    ChatRequest,
    PackingRequest,
    PersonalityRequest,
    RecommendationRequest,
    RescaleRequest,
    SituationIn,
)
from moodtrip.services.personalization.profile import RecommendationContext, TravelerProfile
from moodtrip.services.personalization.service import PersonalizationService

router = APIRouter()


def _profile_payload(profile: TravelerProfile) -> dict:
    data = asdict(profile)
    data["preferences"]["seasonal_patterns"] = dict(profile.preferences.seasonal_patterns)
    return data


def _to_context(
    situation: SituationIn | None,
    trip_details: dict | None = None,
) -> RecommendationContext | None:
    """Merge caller-supplied situation over the default for the trip."""
    if situation is None:
        return None
    default = RecommendationContext.for_trip(trip_details, today=date.today())
    return RecommendationContext(
        current_season=situation.current_season or default.current_season,
        user_mood=situation.user_mood or default.user_mood,
        weather_conditions=situation.weather_conditions,
        local_events=list(situation.local_events),
        price_alerts=list(situation.price_alerts),
        group_dynamics=situation.group_dynamics,
    )


@router.get("/{user_id}/profile")
async def get_profile(
    user_id: str,
    service: PersonalizationService = Depends(get_personalization_service),
):
    profile = await service.get_profile(user_id)
    return _profile_payload(profile)


@router.post("/{user_id}/profile/rebuild")
async def rebuild_profile(
    user_id: str,
    service: PersonalizationService = Depends(get_personalization_service),
):
    profile = await service.build_profile(user_id)
    return _profile_payload(profile)


@router.put("/{user_id}/personality")
async def update_personality(
    user_id: str,
    req: PersonalityRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    profile = await service.update_personality(user_id, req.personality)
    return _profile_payload(profile)


@router.post("/{user_id}/recommendations")
async def generate_recommendations(
    user_id: str,
    req: RecommendationRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    result = await service.generate_recommendations(
        user_id, req.trip_details, _to_context(req.context, req.trip_details),
    )
    return result.model_dump()


@router.post("/{user_id}/budget")
async def generate_budget(
    user_id: str,
    req: BudgetRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    allocation = await service.generate_budget_allocation(user_id, req.total_budget, req.trip_details)
    return allocation.model_dump()


@router.post("/budget/rescale")
async def rescale_budget(
    req: RescaleRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    try:
        allocation = service.rescale_budget(req.allocation, req.total_budget)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return allocation.model_dump()


@router.post("/{user_id}/packing-list")
async def generate_packing_list(
    user_id: str,
    req: PackingRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    packing = await service.generate_packing_list(user_id, req.trip_details, req.weather)
    return packing.model_dump()


@router.post("/chat")
async def chat_signed_out(
    req: ChatRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    reply = await service.chat(None, req.message)
    return reply.model_dump()


@router.post("/{user_id}/chat")
async def chat(
    user_id: str,
    req: ChatRequest,
    service: PersonalizationService = Depends(get_personalization_service),
):
    reply = await service.chat(user_id, req.message, _to_context(req.context))
    return reply.model_dump()


@router.get("/{user_id}/insights")
async def get_insights(
    user_id: str,
    service: PersonalizationService = Depends(get_personalization_service),
):
    insights = await service.generate_predictive_insights(user_id)
    return insights.model_dump()
