import re
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models: snake_case attributes, camelCase JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


SUSPICIOUS_PATTERNS = ['<script>', 'javascript:', 'data:text/html']

def clean_request_text(v: str, max_length: int = 2000) -> str:
    if not v or not v.strip():
        raise ValueError("Travel request cannot be empty")
    if len(v) > max_length:
        raise ValueError(f"Travel request too long (max {max_length} characters)")
    if any(pattern in v.lower() for pattern in SUSPICIOUS_PATTERNS):
        raise ValueError("Travel request contains invalid content")
    return v.strip()

# ===== SHARED SHAPES =====

class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

class ActivityType(str, Enum):
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"

# ===== CATALOG SCHEMAS =====

class DestinationRead(CamelModel):
    id: str
    name: str
    country: str
    description: str
    image: str
    highlights: List[str] = Field(default_factory=list)
    estimated_cost: float
    duration: str
    coordinates: Coordinates
    match_score: float = 0

    @field_validator('duration', mode='before')
    @classmethod
    def coerce_duration(cls, v):
        # the model sometimes answers with a bare number of days
        if isinstance(v, (int, float)):
            return f"{int(v)} days"
        return v

class DestinationCreate(DestinationRead):
    pass

# ===== TRAVEL PLAN SCHEMAS =====

class Activity(CamelModel):
    id: str
    time: str
    title: str
    description: str = ""
    location: str = ""
    coordinates: Optional[Coordinates] = None
    cost: float = 0
    type: str = ActivityType.ATTRACTION.value
    rating: Optional[float] = Field(default=None, ge=0, le=5)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

class DayPlan(CamelModel):
    day: int = Field(..., ge=1)
    date: str
    total_cost: float = 0
    activities: List[Activity] = Field(default_factory=list)

class CostBreakdown(CamelModel):
    accommodation: float = 0
    food: float = 0
    transport: float = 0
    activities: float = 0
    total: float = 0

class TravelPlanRead(CamelModel):
    id: str = Field(..., min_length=1, max_length=100)
    destination: str
    duration: int = Field(..., ge=1)
    map_center: Coordinates
    preferences: List[str] = Field(default_factory=list)
    cost_breakdown: CostBreakdown
    itinerary: List[DayPlan] = Field(default_factory=list)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

class TravelPlanSummary(CamelModel):
    id: str
    destination: str
    duration: int
    source: str
    activity_count: int
    created_at: Optional[datetime] = None

# ===== PLANNER SCHEMAS =====

class InterestPreferences(CamelModel):
    cultural: List[str] = Field(default_factory=list)
    food: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)
    atmosphere: List[str] = Field(default_factory=list)

class ParsedInterests(CamelModel):
    interests: List[str] = Field(default_factory=list)
    preferences: InterestPreferences = Field(default_factory=InterestPreferences)
    keywords: List[str] = Field(default_factory=list)
    travel_style: str = "mid-range"
    duration: int = 5

    @field_validator('duration', mode='before')
    @classmethod
    def coerce_duration(cls, v):
        # "5", 5, "5 days" all mean five days; anything unreadable falls back to 5
        if isinstance(v, (int, float)) and v > 0:
            return int(v)
        if isinstance(v, str):
            m = re.match(r"\s*(\d+)", v)
            if m and int(m.group(1)) > 0:
                return int(m.group(1))
        return 5

    @field_validator('travel_style', mode='before')
    @classmethod
    def coerce_travel_style(cls, v):
        if isinstance(v, str) and v.strip().lower() in ("budget", "mid-range", "luxury"):
            return v.strip().lower()
        return "mid-range"

class Recommendations(CamelModel):
    destinations: List[Dict[str, Any]] = Field(default_factory=list)
    restaurants: List[Dict[str, Any]] = Field(default_factory=list)
    attractions: List[Dict[str, Any]] = Field(default_factory=list)
    experiences: List[Dict[str, Any]] = Field(default_factory=list)

class PlanRequest(CamelModel):
    message: str = Field(..., description="Free-text travel wish")
    budget: Optional[float] = Field(default=None, gt=0, description="Budget in USD")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        return clean_request_text(v)

class InterestsRequest(CamelModel):
    message: str

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        return clean_request_text(v)

class VenueSearchRequest(CamelModel):
    query: str = Field(..., min_length=1, max_length=200)
    location: str = Field(default="", max_length=200)

# ===== CHAT SCHEMAS =====

class ConversationStep(str, Enum):
    INITIAL = "initial"
    BUDGET = "budget"
    DESTINATIONS = "destinations"
    GENERATING = "generating"
    ITINERARY = "itinerary"

class Message(CamelModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime

class ConversationState(CamelModel):
    step: ConversationStep = ConversationStep.INITIAL
    travel_wish: Optional[str] = None
    budget: Optional[int] = None
    user_location: Optional[Coordinates] = None
    selected_destination: Optional[DestinationRead] = None

class ChatSessionCreate(CamelModel):
    user_location: Optional[Coordinates] = None

class ChatMessageRequest(CamelModel):
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError("Message cannot be empty")
        if len(v) > 2000:
            raise ValueError("Message too long (max 2000 characters)")
        return v.strip()

class SelectDestinationRequest(CamelModel):
    destination_id: str = Field(..., min_length=1, max_length=100)

class ChatSessionRead(CamelModel):
    id: str
    mode: str
    state: ConversationState
    messages: List[Message]
    recommended_destinations: List[DestinationRead] = Field(default_factory=list)
    current_plan: Optional[TravelPlanRead] = None
    panel: Literal["destinations", "itinerary"]

# ===== MAP SCHEMAS =====

class MapMarker(CamelModel):
    activity_id: str
    day: int
    title: str
    location: str
    type: str
    time: str
    cost: float
    coordinates: Coordinates

class RouteLeg(CamelModel):
    from_activity_id: str
    to_activity_id: str
    distance_km: float
    travel_minutes: float

class DayRoute(CamelModel):
    day: int
    date: str
    stops: List[MapMarker]
    legs: List[RouteLeg]
    total_distance_km: float
    total_travel_minutes: float

class MapView(CamelModel):
    plan_id: str
    destination: str
    map_center: Coordinates
    markers: List[MapMarker]
    routes: List[DayRoute]
    activity_count: int

# ===== CATALOG STATISTICS SCHEMAS =====

class CatalogStats(BaseModel):
    destinations_count: int
    travel_plans_count: int
    generated_plans_count: int
    total_items: int
    last_updated: datetime

class SeedingStatus(BaseModel):
    is_seeded: bool
    destinations_seeded: int
    travel_plans_seeded: int
    fallback_plan_available: bool
    seeding_log_file: Optional[str] = None

# ===== DOCUMENT CONVERSION =====

def destination_from_row(row) -> DestinationRead:
    return DestinationRead(
        id=row.id,
        name=row.name,
        country=row.country,
        description=row.description,
        image=row.image,
        highlights=list(row.highlights or []),
        estimated_cost=row.estimated_cost,
        duration=row.duration,
        coordinates=Coordinates(**row.coordinates),
        match_score=row.match_score or 0,
    )

def destination_document(destination: DestinationRead) -> Dict[str, Any]:
    """Snake_case dict accepted by crud.upsert_destination"""
    return destination.model_dump()

def travel_plan_from_row(row) -> TravelPlanRead:
    return TravelPlanRead.model_validate({
        "id": row.id,
        "destination": row.destination,
        "duration": row.duration,
        "mapCenter": row.map_center,
        "preferences": row.preferences or [],
        "costBreakdown": row.cost_breakdown,
        "itinerary": row.itinerary or [],
    })

def travel_plan_document(plan: TravelPlanRead) -> Dict[str, Any]:
    """Top-level columns in snake_case, nested JSON parts in the camelCase wire shape"""
    nested = plan.model_dump(by_alias=True, exclude_none=True)
    return {
        "id": plan.id,
        "destination": plan.destination,
        "duration": plan.duration,
        "preferences": list(plan.preferences),
        "map_center": nested["mapCenter"],
        "cost_breakdown": nested["costBreakdown"],
        "itinerary": nested["itinerary"],
    }
