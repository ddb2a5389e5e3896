from typing import List, Optional

from geopy.distance import geodesic

from app.api.schemas import (
    TravelPlanRead, DayPlan, MapMarker, RouteLeg, DayRoute, MapView,
)

# assume 40 km/h average speed between stops
AVERAGE_SPEED_KMH = 40.0


def travel_minutes(distance_km: float) -> float:
    return distance_km / AVERAGE_SPEED_KMH * 60


def day_markers(day: DayPlan) -> List[MapMarker]:
    """Activities of one day that can be placed on the map, in schedule order"""
    return [
        MapMarker(
            activity_id=a.id,
            day=day.day,
            title=a.title,
            location=a.location,
            type=a.type,
            time=a.time,
            cost=a.cost,
            coordinates=a.coordinates,
        )
        for a in day.activities
        if a.coordinates is not None
    ]


def map_markers(plan: TravelPlanRead) -> List[MapMarker]:
    """Every mappable activity across the trip"""
    return [m for day in plan.itinerary for m in day_markers(day)]


def day_route(plan: TravelPlanRead, day_number: int) -> Optional[DayRoute]:
    """
    Route through one day's stops with geodesic leg distances.

    Returns None when the plan has no such day.
    """
    day = next((d for d in plan.itinerary if d.day == day_number), None)
    if day is None:
        return None

    stops = day_markers(day)
    legs: List[RouteLeg] = []
    for a, b in zip(stops, stops[1:]):
        dist_km = geodesic(
            (a.coordinates.lat, a.coordinates.lng),
            (b.coordinates.lat, b.coordinates.lng),
        ).km
        legs.append(RouteLeg(
            from_activity_id=a.activity_id,
            to_activity_id=b.activity_id,
            distance_km=round(dist_km, 3),
            travel_minutes=round(travel_minutes(dist_km), 1),
        ))

    return DayRoute(
        day=day.day,
        date=day.date,
        stops=stops,
        legs=legs,
        total_distance_km=round(sum(l.distance_km for l in legs), 3),
        total_travel_minutes=round(sum(l.travel_minutes for l in legs), 1),
    )


def activity_count(plan: TravelPlanRead) -> int:
    return sum(len(day.activities) for day in plan.itinerary)


def build_map_view(plan: TravelPlanRead) -> MapView:
    return MapView(
        plan_id=plan.id,
        destination=plan.destination,
        map_center=plan.map_center,
        markers=map_markers(plan),
        routes=[day_route(plan, d.day) for d in plan.itinerary],
        activity_count=activity_count(plan),
    )
