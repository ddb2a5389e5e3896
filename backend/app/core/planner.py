"""
Trip planner pipeline: interests -> taste recommendations -> itinerary -> store
"""

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import ParsedInterests, Recommendations, TravelPlanRead, travel_plan_document
from app.core.llm.gemini import GeminiClient
from app.core.recommender.qloo import QlooClient
from app.core.settings import Settings
from app.db.crud import save_travel_plan
from app.db.models import PlanSource

logger = logging.getLogger(__name__)

@asynccontextmanager
async def performance_timer(operation: str):
    """Context manager for timing operations"""
    start = time.time()
    try:
        yield
    finally:
        duration = time.time() - start
        logger.info(f"{operation} completed in {duration:.2f}s")

def new_plan_id() -> str:
    """Server-side id for generated plans; model-supplied ids are never trusted"""
    return f"trip-{int(time.time() * 1000)}-{uuid4().hex[:8]}"

@dataclass
class PlannedTrip:
    interests: ParsedInterests
    recommendations: Recommendations
    plan: TravelPlanRead


class TripPlanner:
    """Runs the three external calls in strict sequence, then persists the plan"""

    def __init__(
        self,
        session: AsyncSession,
        gemini: GeminiClient,
        qloo: QlooClient,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.gemini = gemini
        self.qloo = qloo
        self.settings = settings or Settings()

    async def plan_trip(self, message: str, budget: Optional[float] = None) -> PlannedTrip:
        """Raises ItineraryGenerationError when the model can't produce a plan"""
        budget = budget or self.settings.DEFAULT_BUDGET

        async with performance_timer("trip_planning"):
            interests = await self.gemini.parse_user_interests(message)
            logger.info(f"Parsed {len(interests.interests)} interests, style={interests.travel_style}")

            recommendations = await self.qloo.get_recommendations(interests)

            plan = await self.gemini.generate_itinerary(interests, recommendations, budget=budget)
            plan = plan.model_copy(update={"id": new_plan_id()})

            await save_travel_plan(
                self.session,
                travel_plan_document(plan),
                source=PlanSource.GENERATED,
                request_text=message,
            )
            logger.info(f"Planned trip {plan.id} to {plan.destination} within ${budget:,.0f}")

        return PlannedTrip(interests=interests, recommendations=recommendations, plan=plan)
