from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.limits import limiter, RATE_LIMIT_READ, RATE_LIMIT_DELETE
from app.api.schemas import (
    TravelPlanRead, TravelPlanSummary, MapView, DayRoute,
    travel_plan_from_row,
)
from app.core.day_routes import build_map_view, day_route
from app.db.crud import get_travel_plan, list_travel_plans, delete_travel_plan
from app.db.models import PlanSource
from app.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itinerary", tags=["itineraries"])


async def load_plan_or_404(session: AsyncSession, plan_id: str) -> TravelPlanRead:
    row = await get_travel_plan(session, plan_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return travel_plan_from_row(row)


@router.get("", response_model=List[TravelPlanSummary])
@limiter.limit(RATE_LIMIT_READ)
async def list_itineraries(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    source: Optional[PlanSource] = None,
    session: AsyncSession = Depends(get_session),
):
    rows = await list_travel_plans(session, skip=skip, limit=limit, source=source)
    return [
        TravelPlanSummary(
            id=r.id,
            destination=r.destination,
            duration=r.duration,
            source=r.source.value if isinstance(r.source, PlanSource) else str(r.source),
            activity_count=r.activity_count,
            created_at=r.created_at,
        )
        for r in rows
    ]


@router.get("/{destination_id}",
    response_model=TravelPlanRead,
    responses={
        400: {"description": "destinationId is required"},
        404: {"description": "Itinerary not found"},
        500: {"description": "Store unavailable"},
    },
    summary="Stored itinerary for a destination",
)
@limiter.limit(RATE_LIMIT_READ)
async def read_itinerary(
    request: Request,
    destination_id: str,
    session: AsyncSession = Depends(get_session),
):
    """Travel plan whose id is the destination's slug"""
    logger.info(f"Itinerary requested for destinationId={destination_id!r}")
    if not destination_id.strip():
        return JSONResponse(status_code=400, content={"error": "destinationId is required"})

    try:
        row = await get_travel_plan(session, destination_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching itinerary: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    if row is None:
        return JSONResponse(status_code=404, content={"error": "Itinerary not found"})
    return travel_plan_from_row(row)


@router.get("/{plan_id}/map", response_model=MapView)
@limiter.limit(RATE_LIMIT_READ)
async def read_itinerary_map(
    request: Request,
    plan_id: str,
    session: AsyncSession = Depends(get_session),
):
    """Markers and per-day routes for the map panel"""
    plan = await load_plan_or_404(session, plan_id)
    return build_map_view(plan)


@router.get("/{plan_id}/days/{day}/route", response_model=DayRoute)
@limiter.limit(RATE_LIMIT_READ)
async def read_day_route(
    request: Request,
    plan_id: str,
    day: int,
    session: AsyncSession = Depends(get_session),
):
    plan = await load_plan_or_404(session, plan_id)
    route = day_route(plan, day)
    if route is None:
        raise HTTPException(status_code=404, detail=f"Day {day} not found in itinerary")
    return route


@router.delete("/{plan_id}", status_code=204)
@limiter.limit(RATE_LIMIT_DELETE)
async def remove_itinerary(
    request: Request,
    plan_id: str,
    session: AsyncSession = Depends(get_session),
):
    if not await delete_travel_plan(session, plan_id):
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
