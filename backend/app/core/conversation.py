"""
Scripted chat flow: initial -> budget -> destinations (catalog) or generating -> itinerary.

Each session keeps its own state, transcript, recommended destinations and the
plan currently on screen. The `panel` of a session tells the front end which
right-hand panel to render.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import (
    ChatSessionRead, ConversationState, ConversationStep, Coordinates,
    DestinationRead, Message, TravelPlanRead,
    destination_from_row, travel_plan_from_row,
)
from app.core.day_routes import activity_count
from app.core.planner import TripPlanner
from app.core.recommender.scoring import recommend_destinations
from app.core.settings import Settings
from app.db.crud import get_destination, get_travel_plan, list_destinations

logger = logging.getLogger(__name__)

CATALOG_MODE = "catalog"
GENERATIVE_MODE = "generative"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

APOLOGY = "I apologize, but I'm having trouble processing your request right now. Please try again!"
BUDGET_RETRY = (
    "I need a numeric budget to help you better. "
    "Please enter your budget as a number (e.g., 2000 for $2,000)."
)
EXPLORING_REMINDER = (
    "I can see you're exploring the destination options! Feel free to click on any destination card "
    "to select it and see your personalized itinerary. Each destination has been carefully matched "
    "to your preferences and budget."
)
ITINERARY_FOLLOW_UP = (
    "Your itinerary looks amazing! You can explore the interactive 3D map to see all your planned "
    "activities. Feel free to ask me any questions about your trip, or if you'd like to modify anything!"
)
STILL_GENERATING = "I'm still putting your itinerary together. It will appear here as soon as it's ready!"
GREETING = "I'm here to help you plan your perfect trip! Tell me about your travel preferences to get started."


class ConversationError(Exception):
    """Base for chat flow errors surfaced to the API"""


class SessionNotFoundError(ConversationError):
    pass


class SelectionNotAllowedError(ConversationError):
    pass


class DestinationNotFoundError(ConversationError):
    pass


class ItineraryNotFoundError(ConversationError):
    pass


def parse_budget(text: str) -> Optional[int]:
    """Leading integer after dropping '$' and ',' ("$2,500 or so" -> 2500)"""
    m = _LEADING_INT_RE.match(text.replace("$", "").replace(",", ""))
    if not m:
        return None
    value = int(m.group(1))
    return value if value > 0 else None


def _message(role: str, content: str) -> Message:
    return Message(id=str(uuid4()), role=role, content=content, timestamp=datetime.now(timezone.utc))


@dataclass
class ConversationSession:
    mode: str
    id: str = field(default_factory=lambda: str(uuid4()))
    state: ConversationState = field(default_factory=ConversationState)
    messages: List[Message] = field(default_factory=list)
    recommended_destinations: List[DestinationRead] = field(default_factory=list)
    current_plan: Optional[TravelPlanRead] = None

    @property
    def panel(self) -> str:
        if self.state.step == ConversationStep.DESTINATIONS and self.recommended_destinations:
            return "destinations"
        return "itinerary"

    def add(self, role: str, content: str) -> Message:
        msg = _message(role, content)
        self.messages.append(msg)
        return msg

    def to_read(self) -> ChatSessionRead:
        return ChatSessionRead(
            id=self.id,
            mode=self.mode,
            state=self.state,
            messages=self.messages,
            recommended_destinations=self.recommended_destinations,
            current_plan=self.current_plan,
            panel=self.panel,
        )


class ConversationStore:
    """In-process session store, oldest sessions evicted past max_sessions"""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ConversationSession]" = OrderedDict()

    def create(self, mode: str, user_location: Optional[Coordinates] = None) -> ConversationSession:
        conv = ConversationSession(mode=mode, state=ConversationState(user_location=user_location))
        self._sessions[conv.id] = conv
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted chat session {evicted}")
        return conv

    def get(self, session_id: str) -> ConversationSession:
        conv = self._sessions.get(session_id)
        if conv is None:
            raise SessionNotFoundError(session_id)
        return conv

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


conversation_store = ConversationStore()


class ConversationEngine:
    """Advances a session by one user turn"""

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        planner: Optional[TripPlanner] = None,
    ):
        self.session = session
        self.settings = settings or Settings()
        self.planner = planner

    async def handle_message(self, conv: ConversationSession, content: str) -> Message:
        conv.add("user", content)
        snapshot = conv.state.model_copy(deep=True)
        try:
            reply = await self._respond(conv, content)
        except Exception as e:
            logger.error(f"Error generating response for session {conv.id}: {e}")
            conv.state = snapshot
            reply = APOLOGY
        return conv.add("assistant", reply)

    async def _respond(self, conv: ConversationSession, content: str) -> str:
        step = conv.state.step

        if step == ConversationStep.INITIAL:
            conv.state.travel_wish = content
            conv.state.step = ConversationStep.BUDGET
            return (
                f"Perfect! I can see you're interested in \"{content}\". To create the best "
                f"recommendations for you, what's your travel budget? This will help me suggest "
                f"destinations that match both your preferences and financial comfort zone."
            )

        if step == ConversationStep.BUDGET:
            budget = parse_budget(content)
            if budget is None:
                return BUDGET_RETRY
            if conv.mode == GENERATIVE_MODE:
                return await self._generate(conv, budget)
            return await self._recommend(conv, budget)

        if step == ConversationStep.DESTINATIONS:
            return EXPLORING_REMINDER

        if step == ConversationStep.ITINERARY:
            return ITINERARY_FOLLOW_UP

        if step == ConversationStep.GENERATING:
            return STILL_GENERATING

        return GREETING

    async def _recommend(self, conv: ConversationSession, budget: int) -> str:
        wish = conv.state.travel_wish or ""
        catalog = [destination_from_row(row) for row in await list_destinations(self.session)]
        destinations = recommend_destinations(wish, budget, catalog, self.settings.RECOMMENDATION_COUNT)

        conv.recommended_destinations = destinations
        conv.state.budget = budget
        conv.state.step = ConversationStep.DESTINATIONS
        logger.info(f"Session {conv.id}: recommended {len(destinations)} destinations for budget {budget}")

        return (
            f"Excellent! With a budget of ${budget:,}, I've found {len(destinations)} amazing destinations "
            f"that match your preferences for \"{wish}\". Each destination is scored based on how well it "
            f"matches your interests. Check out the recommendations on the right and click on your "
            f"favorite to see the detailed itinerary!"
        )

    async def _generate(self, conv: ConversationSession, budget: int) -> str:
        if self.planner is None:
            raise RuntimeError("Generative chat needs a trip planner")

        wish = conv.state.travel_wish or ""
        conv.state.budget = budget
        conv.state.step = ConversationStep.GENERATING

        trip = await self.planner.plan_trip(wish, budget)
        plan = trip.plan

        conv.current_plan = plan
        conv.state.step = ConversationStep.ITINERARY
        return (
            f"Your {plan.duration}-day trip to {plan.destination} is ready! Based on \"{wish}\", I've "
            f"planned {activity_count(plan)} experiences with an estimated total of "
            f"${plan.cost_breakdown.total:,.0f} against your ${budget:,} budget. Explore the 3D map to "
            f"see your journey come to life!"
        )

    async def select_destination(self, conv: ConversationSession, destination_id: str) -> Message:
        if conv.state.step != ConversationStep.DESTINATIONS:
            raise SelectionNotAllowedError(conv.state.step.value)

        destination = next((d for d in conv.recommended_destinations if d.id == destination_id), None)
        if destination is None:
            row = await get_destination(self.session, destination_id)
            if row is None:
                raise DestinationNotFoundError(destination_id)
            destination = destination_from_row(row)

        conv.add("user", f"I choose {destination.name}, {destination.country}!")

        try:
            plan = await self._load_plan(destination.id)
        except Exception as e:
            logger.error(f"Error loading itinerary for {destination.id}: {e}")
            return conv.add("assistant", APOLOGY)

        conv.current_plan = plan
        conv.state.selected_destination = destination
        conv.state.step = ConversationStep.ITINERARY

        budget = conv.state.budget or 0
        return conv.add(
            "assistant",
            f"Fantastic choice! {destination.name} is perfect for your preferences. I've created a "
            f"detailed {plan.duration}-day itinerary with a 3D interactive map showing all your "
            f"activities. Your trip includes {activity_count(plan)} carefully selected experiences "
            f"within your ${budget:,} budget. Explore the 3D map to see your journey come to life!",
        )

    async def _load_plan(self, destination_id: str) -> TravelPlanRead:
        row = await get_travel_plan(self.session, destination_id)
        if row is None:
            fallback_id = self.settings.FALLBACK_DESTINATION_ID
            logger.warning(f"No itinerary stored for {destination_id}, falling back to {fallback_id}")
            row = await get_travel_plan(self.session, fallback_id)
        if row is None:
            raise ItineraryNotFoundError(destination_id)
        return travel_plan_from_row(row)
