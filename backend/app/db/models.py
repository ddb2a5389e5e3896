from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Index, CheckConstraint, JSON
from sqlalchemy.orm import declared_attr, Mapped

# Enums
class PlanSource(str, Enum):
    SEED = "seed"
    GENERATED = "generated"

# Base model with common fields
class BaseModel(SQLModel):
    """Base model shared by all tables"""
    pass

class AuditMixin:
    __allow_unmapped__ = True

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=lambda: datetime.now(timezone.utc),
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=lambda: datetime.now(timezone.utc),
            onupdate=lambda: datetime.now(timezone.utc),
        )

# Models
class Destination(AuditMixin, BaseModel, table=True):
    __tablename__ = "destinations"

    __table_args__ = (
        Index('idx_destinations_name', 'name'),
        Index('idx_destinations_country', 'country'),
        Index('idx_destinations_estimated_cost', 'estimated_cost'),
        CheckConstraint('latitude BETWEEN -90 AND 90', name='check_valid_latitude'),
        CheckConstraint('longitude BETWEEN -180 AND 180', name='check_valid_longitude'),
        CheckConstraint('estimated_cost >= 0', name='check_non_negative_cost'),
    )

    id: str = Field(
        primary_key=True,
        max_length=100,
        description="Slug identifier, also the id of the destination's stored travel plan"
    )
    name: str = Field(max_length=200, description="Destination name")
    country: str = Field(max_length=100, description="Country name")
    description: str = Field(max_length=2000, description="Short pitch shown on the card")
    image: str = Field(max_length=500, description="Card image URL")
    highlights: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Headline attractions"
    )
    estimated_cost: float = Field(description="Estimated trip cost in USD")
    duration: str = Field(max_length=50, description="Suggested trip length, e.g. '5-7 days'")
    latitude: float = Field(description="Latitude coordinate")
    longitude: float = Field(description="Longitude coordinate")
    match_score: float = Field(default=0.0, description="Base score before keyword and budget matching")

    @property
    def coordinates(self) -> Dict[str, float]:
        return {"lat": self.latitude, "lng": self.longitude}


class TravelPlan(AuditMixin, BaseModel, table=True):
    __tablename__ = "travel_plans"

    __table_args__ = (
        Index('idx_travel_plans_destination', 'destination'),
        Index('idx_travel_plans_source', 'source'),
        Index('idx_travel_plans_created_at', 'created_at'),
        CheckConstraint('duration > 0', name='check_positive_duration'),
    )

    id: str = Field(primary_key=True, max_length=100, description="Plan id (destination slug for seeded plans)")
    destination: str = Field(max_length=200, description="'City, Country'")
    duration: int = Field(description="Trip length in days")
    source: PlanSource = Field(
        default=PlanSource.SEED,
        description="Where the plan came from"
    )

    # Nested parts are kept as JSON documents and returned verbatim
    map_center: Dict[str, float] = Field(
        sa_column=Column(JSON, nullable=False),
        description="Map center {lat, lng}"
    )
    preferences: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Preference tags shown in the itinerary header"
    )
    cost_breakdown: Dict[str, Any] = Field(
        sa_column=Column(JSON, nullable=False),
        description="accommodation/food/transport/activities/total"
    )
    itinerary: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Day plans with their activities"
    )
    request_text: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Free-text request a generated plan was built from"
    )

    @property
    def activity_count(self) -> int:
        return sum(len(day.get("activities") or []) for day in self.itinerary or [])
