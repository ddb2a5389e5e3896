"""
CRUD operations for destination records and travel plans
"""

import logging
from typing import List, Optional, Dict, Any

from sqlalchemy import select, delete, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Destination, TravelPlan, PlanSource

logger = logging.getLogger(__name__)

# ===== DESTINATION CRUD OPERATIONS =====

async def list_destinations(session: AsyncSession) -> List[Destination]:
    """All destination records, in insertion order"""
    result = await session.execute(select(Destination).order_by(Destination.created_at, Destination.id))
    return list(result.scalars().all())

async def get_destination(session: AsyncSession, destination_id: str) -> Optional[Destination]:
    result = await session.execute(
        select(Destination).where(Destination.id == destination_id)
    )
    return result.scalar_one_or_none()

async def upsert_destination(session: AsyncSession, data: Dict[str, Any]) -> Destination:
    """Insert or replace a destination keyed by its slug"""
    try:
        coords = data.get("coordinates") or {}
        values = {
            "name": data["name"],
            "country": data["country"],
            "description": data["description"],
            "image": data["image"],
            "highlights": list(data.get("highlights") or []),
            "estimated_cost": float(data["estimated_cost"]),
            "duration": str(data["duration"]),
            "latitude": float(coords["lat"]),
            "longitude": float(coords["lng"]),
            "match_score": float(data.get("match_score") or 0),
        }
        destination = await get_destination(session, data["id"])
        if destination is None:
            destination = Destination(id=data["id"], **values)
            session.add(destination)
        else:
            for key, value in values.items():
                setattr(destination, key, value)
        await session.commit()
        await session.refresh(destination)
        logger.info(f"Upserted destination: {destination.id}")
        return destination
    except Exception as e:
        await session.rollback()
        logger.error(f"Error upserting destination {data.get('id')}: {e}")
        raise

async def count_destinations(session: AsyncSession) -> int:
    return await session.scalar(select(func.count(Destination.id))) or 0

# ===== TRAVEL PLAN CRUD OPERATIONS =====

async def get_travel_plan(session: AsyncSession, plan_id: str) -> Optional[TravelPlan]:
    result = await session.execute(
        select(TravelPlan).where(TravelPlan.id == plan_id)
    )
    return result.scalar_one_or_none()

async def save_travel_plan(
    session: AsyncSession,
    plan: Dict[str, Any],
    source: PlanSource = PlanSource.SEED,
    request_text: Optional[str] = None,
) -> TravelPlan:
    """Insert or replace a travel plan document.

    ``plan`` is the snake_case dump of a validated travel plan; nested parts are
    stored as camelCase JSON so they read back in the wire shape.
    Seeded plans are only ever replaced by another seed.
    """
    try:
        values = {
            "destination": plan["destination"],
            "duration": int(plan["duration"]),
            "map_center": plan["map_center"],
            "preferences": list(plan.get("preferences") or []),
            "cost_breakdown": plan["cost_breakdown"],
            "itinerary": plan["itinerary"],
            "source": source,
            "request_text": request_text,
        }
        row = await get_travel_plan(session, plan["id"])
        if row is not None and row.source == PlanSource.SEED and source != PlanSource.SEED:
            raise ValueError(f"Travel plan {plan['id']} is seeded and cannot be replaced")
        if row is None:
            row = TravelPlan(id=plan["id"], **values)
            session.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await session.commit()
        await session.refresh(row)
        logger.info(f"Saved travel plan: {row.id} ({source.value})")
        return row
    except Exception as e:
        await session.rollback()
        logger.error(f"Error saving travel plan {plan.get('id')}: {e}")
        raise

async def list_travel_plans(
    session: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    source: Optional[PlanSource] = None,
) -> List[TravelPlan]:
    """Travel plans with pagination, newest first"""
    stmt = select(TravelPlan)
    if source is not None:
        stmt = stmt.where(TravelPlan.source == source)
    result = await session.execute(
        stmt.order_by(desc(TravelPlan.created_at)).offset(skip).limit(limit)
    )
    return list(result.scalars().all())

async def delete_travel_plan(session: AsyncSession, plan_id: str) -> bool:
    try:
        result = await session.execute(delete(TravelPlan).where(TravelPlan.id == plan_id))
        await session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted travel plan: {plan_id}")
        return deleted
    except Exception as e:
        await session.rollback()
        logger.error(f"Error deleting travel plan {plan_id}: {e}")
        raise

async def count_travel_plans(session: AsyncSession, source: Optional[PlanSource] = None) -> int:
    stmt = select(func.count(TravelPlan.id))
    if source is not None:
        stmt = stmt.where(TravelPlan.source == source)
    return await session.scalar(stmt) or 0
