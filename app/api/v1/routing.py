"""Stateless routing helpers for intake forms."""

from fastapi import APIRouter

from app.rules.episode_classification import classify_episode
from app.rules.routing import get_routing_badge, get_suggested_episode_type
from app.schemas.lead import (
    ComplaintClassification,
    ComplaintClassifyRequest,
    RoutingSuggestion,
    RoutingSuggestRequest,
)
from app.services.leads import exam_type_for

router = APIRouter()


@router.post("/suggest", response_model=RoutingSuggestion, summary="Suggest an episode type")
async def suggest_route(payload: RoutingSuggestRequest) -> RoutingSuggestion:
    route = get_suggested_episode_type(payload.system_category, payload.primary_concern)
    badge = get_routing_badge(route)
    return RoutingSuggestion(
        suggested_episode_type=route.value,
        badge_label=badge.label,
        badge_variant=badge.variant,
        new_patient_exam_type=exam_type_for(route, payload.system_category).value,
    )


@router.post(
    "/classify-complaint",
    response_model=ComplaintClassification,
    summary="Classify a chief complaint",
)
async def classify_complaint(payload: ComplaintClassifyRequest) -> ComplaintClassification:
    result = classify_episode(payload.chief_complaint)
    return ComplaintClassification(
        episode_type=result.episode_type,
        body_region=result.body_region,
        confidence=result.confidence,
        label=result.format(),
    )
