"""
Destination catalog endpoints consumed by the recommendation panel
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.limits import limiter, RATE_LIMIT_READ
from app.api.schemas import DestinationRead, destination_from_row
from app.core.recommender.scoring import recommend_destinations
from app.core.settings import Settings, get_settings
from app.db.crud import list_destinations, get_destination
from app.db.session import get_session

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["destinations"])


@router.get("/destination",
    response_model=List[DestinationRead],
    responses={500: {"description": "Store unavailable"}},
    summary="List destination records",
)
@limiter.limit(RATE_LIMIT_READ)
async def list_destination_records(
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    """Every stored destination, as shown on the recommendation cards"""
    try:
        rows = await list_destinations(session)
    except SQLAlchemyError as e:
        logger.error("destinations_fetch_failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )

    logger.info("destinations_fetched", count=len(rows))
    return [destination_from_row(r) for r in rows]


@router.get("/destinations/recommended",
    response_model=List[DestinationRead],
    summary="Score stored destinations against a travel wish and budget",
)
@limiter.limit(RATE_LIMIT_READ)
async def recommended_destinations(
    request: Request,
    travel_wish: str = Query("", alias="travelWish", max_length=2000),
    budget: float = Query(..., gt=0),
    count: Optional[int] = Query(None, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    try:
        rows = await list_destinations(session)
    except SQLAlchemyError as e:
        logger.error("destinations_fetch_failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(status_code=500, detail="Failed to load destinations")

    ranked = recommend_destinations(
        travel_wish,
        budget,
        [destination_from_row(r) for r in rows],
        count or settings.RECOMMENDATION_COUNT,
    )
    logger.info(
        "destinations_recommended",
        wish_length=len(travel_wish),
        budget=budget,
        returned=len(ranked),
        top=[d.id for d in ranked[:3]],
    )
    return ranked


@router.get("/destinations/{destination_id}",
    response_model=DestinationRead,
    responses={404: {"description": "Destination not found"}},
)
@limiter.limit(RATE_LIMIT_READ)
async def read_destination(
    request: Request,
    destination_id: str,
    session: AsyncSession = Depends(get_session),
):
    row = await get_destination(session, destination_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Destination '{destination_id}' not found")
    return destination_from_row(row)
