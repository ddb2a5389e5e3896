"""
Catalog API endpoints for statistics and seeding status
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.settings import Settings, get_settings
from app.db.session import get_session
from app.db.crud import count_destinations, count_travel_plans, get_travel_plan
from app.db.models import PlanSource
from app.api.schemas import CatalogStats, SeedingStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/catalog")

SEEDING_LOG_FILE = "seed_catalog.log"

@router.get("/stats",
    response_model=CatalogStats,
    responses={
        200: {"description": "Catalog statistics retrieved successfully"},
        500: {"description": "Database error"}
    },
    summary="Get catalog statistics",
    description="Counts of stored destinations, travel plans and model-generated plans"
)
async def get_catalog_stats(
    session: AsyncSession = Depends(get_session)
):
    try:
        destinations_count = await count_destinations(session)
        travel_plans_count = await count_travel_plans(session)
        generated_plans_count = await count_travel_plans(session, source=PlanSource.GENERATED)

        stats = CatalogStats(
            destinations_count=destinations_count,
            travel_plans_count=travel_plans_count,
            generated_plans_count=generated_plans_count,
            total_items=destinations_count + travel_plans_count,
            last_updated=datetime.now(timezone.utc)
        )

        logger.info(f"Catalog stats retrieved: {stats.total_items} total items")
        return stats

    except SQLAlchemyError as e:
        logger.error(f"Error retrieving catalog stats: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve catalog statistics"
        )

@router.get("/seeding-status",
    response_model=SeedingStatus,
    responses={
        200: {"description": "Seeding status retrieved successfully"},
        500: {"description": "Database error"}
    },
    summary="Get seeding status",
    description="Whether seed destinations and plans are loaded, including the fallback plan"
)
async def get_seeding_status(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Seeded plans are the ones not produced by the model"""
    try:
        destinations_seeded = await count_destinations(session)
        travel_plans_seeded = await count_travel_plans(session, source=PlanSource.SEED)
        fallback = await get_travel_plan(session, settings.FALLBACK_DESTINATION_ID)

        is_seeded = destinations_seeded > 0 and travel_plans_seeded > 0

        status_info = SeedingStatus(
            is_seeded=is_seeded,
            destinations_seeded=destinations_seeded,
            travel_plans_seeded=travel_plans_seeded,
            fallback_plan_available=fallback is not None,
            seeding_log_file=SEEDING_LOG_FILE if is_seeded else None
        )

        logger.info(
            f"Seeding status: {destinations_seeded} destinations, "
            f"{travel_plans_seeded} plans, is_seeded={is_seeded}"
        )
        return status_info

    except SQLAlchemyError as e:
        logger.error(f"Error retrieving seeding status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve seeding status"
        )
