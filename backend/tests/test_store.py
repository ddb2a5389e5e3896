"""
Destination and travel-plan store on an in-memory SQLite database.
"""

import pytest

from app.api.schemas import TravelPlanRead, travel_plan_document, travel_plan_from_row, destination_from_row
from app.db.crud import (
    list_destinations, get_destination, upsert_destination, count_destinations,
    get_travel_plan, save_travel_plan, list_travel_plans, delete_travel_plan, count_travel_plans,
)
from app.db.models import PlanSource


class TestDestinations:
    @pytest.mark.asyncio
    async def test_seeded_catalog(self, seeded_session):
        rows = await list_destinations(seeded_session)
        assert [r.id for r in rows] == ["swiss-alps", "banff", "maldives", "santorini", "kyoto", "tuscany"]
        assert await count_destinations(seeded_session) == 6

    @pytest.mark.asyncio
    async def test_row_converts_to_wire_shape(self, seeded_session):
        dest = destination_from_row(await get_destination(seeded_session, "kyoto"))
        data = dest.model_dump(by_alias=True)
        assert data["estimatedCost"] == 2400
        assert data["coordinates"] == {"lat": 35.0116, "lng": 135.7681}
        assert data["matchScore"] == 75

    @pytest.mark.asyncio
    async def test_upsert_replaces(self, seeded_session):
        await upsert_destination(seeded_session, {
            "id": "kyoto", "name": "Kyoto", "country": "Japan", "description": "Updated",
            "image": "https://example.com/k.jpg", "highlights": [], "estimated_cost": 1999,
            "duration": "4 days", "coordinates": {"lat": 35.0, "lng": 135.7}, "match_score": 10,
        })
        row = await get_destination(seeded_session, "kyoto")
        assert row.description == "Updated"
        assert row.estimated_cost == 1999
        assert await count_destinations(seeded_session) == 6

    @pytest.mark.asyncio
    async def test_missing_destination(self, session):
        assert await get_destination(session, "atlantis") is None


class TestTravelPlans:
    @pytest.mark.asyncio
    async def test_plan_reads_back_as_written(self, session, sample_plan):
        await save_travel_plan(session, travel_plan_document(sample_plan), source=PlanSource.GENERATED,
                               request_text="food in Lisbon")
        row = await get_travel_plan(session, "trip-1")

        assert row.source == PlanSource.GENERATED
        assert row.request_text == "food in Lisbon"
        assert row.activity_count == 4
        assert travel_plan_from_row(row) == sample_plan
        assert row.itinerary[0]["activities"][0]["coordinates"] == {"lat": 38.6916, "lng": -9.216}
        assert "totalCost" in row.itinerary[0]

    @pytest.mark.asyncio
    async def test_save_is_an_upsert(self, session, plan_data):
        plan = TravelPlanRead.model_validate(plan_data)
        await save_travel_plan(session, travel_plan_document(plan))
        plan_data["destination"] = "Porto, Portugal"
        await save_travel_plan(session, travel_plan_document(TravelPlanRead.model_validate(plan_data)))

        assert await count_travel_plans(session) == 1
        assert (await get_travel_plan(session, "trip-1")).destination == "Porto, Portugal"

    @pytest.mark.asyncio
    async def test_generated_save_never_replaces_seed(self, seeded_session, sample_plan):
        intruder = sample_plan.model_copy(update={"id": "swiss-alps"})
        with pytest.raises(ValueError, match="seeded"):
            await save_travel_plan(seeded_session, travel_plan_document(intruder), source=PlanSource.GENERATED)

        row = await get_travel_plan(seeded_session, "swiss-alps")
        assert row.destination == "Swiss Alps, Switzerland"
        assert row.source == PlanSource.SEED

    @pytest.mark.asyncio
    async def test_list_filters_by_source(self, seeded_session, sample_plan):
        await save_travel_plan(seeded_session, travel_plan_document(sample_plan), source=PlanSource.GENERATED)

        generated = await list_travel_plans(seeded_session, source=PlanSource.GENERATED)
        assert [p.id for p in generated] == ["trip-1"]
        assert await count_travel_plans(seeded_session) == 3
        assert await count_travel_plans(seeded_session, source=PlanSource.SEED) == 2
        assert len(await list_travel_plans(seeded_session, limit=1)) == 1

    @pytest.mark.asyncio
    async def test_delete(self, seeded_session):
        assert await delete_travel_plan(seeded_session, "kyoto") is True
        assert await get_travel_plan(seeded_session, "kyoto") is None
        assert await delete_travel_plan(seeded_session, "kyoto") is False


class TestDatabaseManager:
    @pytest.mark.asyncio
    async def test_health_check(self, db):
        health = await db.health_check()
        assert health["status"] == "healthy"
        assert health["checks"]["connectivity"]["status"] == "pass"

    @pytest.mark.asyncio
    async def test_session_requires_initialize(self, test_settings):
        from app.db.session import DatabaseManager

        manager = DatabaseManager(test_settings)
        with pytest.raises(RuntimeError, match="not initialized"):
            async with manager.get_session():
                pass


@pytest.mark.parametrize("url,expected", [
    ("postgres://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
    ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
    ("sqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ("postgresql+asyncpg://u@h/db", "postgresql+asyncpg://u@h/db"),
])
def test_to_async_url(url, expected):
    from app.db.session import to_async_url
    assert to_async_url(url) == expected
