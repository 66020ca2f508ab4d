"""Personalization engine — traveler profiles and personalized trip artifacts.

Modules:
    config              Defaults, caps, per-task LLM params, retry policies
    exceptions          UpstreamUnavailable / MalformedResponse taxonomy
    profile             TravelerProfile, TripRecord, RecommendationContext
    profile_builder     Aggregates trip records into a profile
    profile_cache       Injected user id → profile map
    context_assembler   Normalizes profile + situation into prompt context
    completion          Retry, deadline and schema validation around the LLM
    recommendations     Hidden gems, budget tips, timing advice
    budget_planner      Category split of a trip budget
    packing_list        Personalized packing list
    travel_buddy        Conversational replies
    insights            Local predictive insights (no LLM)
    fallbacks           Deterministic results used when the LLM path fails
    service             PersonalizationService orchestration

Pipeline:
    TripRecordStore → ProfileBuilder → ProfileCache → ContextAssembler
    → CompletionRunner → generator → fallback on failure
"""
