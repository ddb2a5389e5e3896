from typing import List, Dict, Any
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.limits import limiter, RATE_LIMIT_GENERATE, RATE_LIMIT_READ
from app.api.schemas import (
    PlanRequest, InterestsRequest, VenueSearchRequest,
    ParsedInterests, Recommendations, TravelPlanRead, DestinationRead,
)
from app.core.llm.gemini import GeminiClient, ItineraryGenerationError, get_gemini_client
from app.core.planner import TripPlanner
from app.core.recommender.qloo import QlooClient, get_qloo_client
from app.core.settings import Settings, get_settings
from app.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plan", tags=["planner"])


@router.post("",
    response_model=TravelPlanRead,
    responses={
        422: {"description": "Invalid travel request"},
        502: {"description": "Failed to generate travel itinerary"},
    },
    summary="Generate a travel plan from a free-text wish",
)
@limiter.limit(RATE_LIMIT_GENERATE)
async def create_plan(
    request: Request,
    payload: PlanRequest,
    session: AsyncSession = Depends(get_session),
    gemini: GeminiClient = Depends(get_gemini_client),
    qloo: QlooClient = Depends(get_qloo_client),
    settings: Settings = Depends(get_settings),
):
    """
    Parse interests, fetch taste recommendations, ask the model for an
    itinerary and store it. The stored plan is returned as-is.
    """
    planner = TripPlanner(session, gemini, qloo, settings)
    try:
        trip = await planner.plan_trip(payload.message, payload.budget)
    except ItineraryGenerationError as e:
        logger.error(f"Plan generation failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate travel itinerary")
    return trip.plan


@router.post("/interests", response_model=ParsedInterests)
@limiter.limit(RATE_LIMIT_GENERATE)
async def extract_interests(
    request: Request,
    payload: InterestsRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
):
    return await gemini.parse_user_interests(payload.message)


@router.post("/recommendations", response_model=Recommendations)
@limiter.limit(RATE_LIMIT_READ)
async def taste_recommendations(
    request: Request,
    interests: ParsedInterests,
    qloo: QlooClient = Depends(get_qloo_client),
):
    return await qloo.get_recommendations(interests)


@router.post("/suggestions", response_model=List[DestinationRead])
@limiter.limit(RATE_LIMIT_GENERATE)
async def destination_suggestions(
    request: Request,
    payload: InterestsRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """Three to five model-suggested destinations; empty when the model is unavailable"""
    return await gemini.get_travel_suggestions(payload.message)


@router.post("/venues", response_model=List[Dict[str, Any]])
@limiter.limit(RATE_LIMIT_READ)
async def venue_search(
    request: Request,
    payload: VenueSearchRequest,
    qloo: QlooClient = Depends(get_qloo_client),
):
    return await qloo.search_venues(payload.query, payload.location)
