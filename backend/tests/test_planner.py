import pytest

from app.api.schemas import ParsedInterests, Recommendations
from app.core.llm.gemini import ItineraryGenerationError
from app.core.planner import TripPlanner, performance_timer
from app.db.crud import get_travel_plan, count_travel_plans
from app.db.models import PlanSource


@pytest.mark.asyncio
async def test_performance_timer_logs(caplog):
    with caplog.at_level("INFO", logger="app.core.planner"):
        async with performance_timer("unit_op"):
            pass
    assert "unit_op completed in" in caplog.text


class TestTripPlanner:
    @pytest.mark.asyncio
    async def test_pipeline_runs_in_order_and_persists(self, session, test_settings, fake_gemini, fake_qloo, sample_plan):
        interests = ParsedInterests(interests=["food"], duration=2)
        recommendations = Recommendations(destinations=[{"name": "Lisbon"}])
        fake_gemini.parse_user_interests.return_value = interests
        fake_qloo.get_recommendations.return_value = recommendations
        fake_gemini.generate_itinerary.return_value = sample_plan

        planner = TripPlanner(session, fake_gemini, fake_qloo, test_settings)
        trip = await planner.plan_trip("eat my way through Lisbon", 1500)

        assert trip.plan.id.startswith("trip-") and trip.plan.id != "trip-1"
        assert trip.plan.model_dump(exclude={"id"}) == sample_plan.model_dump(exclude={"id"})
        assert trip.interests is interests
        fake_gemini.parse_user_interests.assert_awaited_once_with("eat my way through Lisbon")
        fake_qloo.get_recommendations.assert_awaited_once_with(interests)
        fake_gemini.generate_itinerary.assert_awaited_once_with(interests, recommendations, budget=1500)

        assert await get_travel_plan(session, "trip-1") is None
        row = await get_travel_plan(session, trip.plan.id)
        assert row.source == PlanSource.GENERATED
        assert row.request_text == "eat my way through Lisbon"

    @pytest.mark.asyncio
    async def test_default_budget(self, session, test_settings, fake_gemini, fake_qloo, sample_plan):
        fake_gemini.parse_user_interests.return_value = ParsedInterests()
        fake_qloo.get_recommendations.return_value = Recommendations()
        fake_gemini.generate_itinerary.return_value = sample_plan

        await TripPlanner(session, fake_gemini, fake_qloo, test_settings).plan_trip("anywhere")

        assert fake_gemini.generate_itinerary.call_args.kwargs["budget"] == 2500

    @pytest.mark.asyncio
    async def test_generation_failure_stores_nothing(self, session, test_settings, fake_gemini, fake_qloo):
        fake_gemini.parse_user_interests.return_value = ParsedInterests()
        fake_qloo.get_recommendations.return_value = Recommendations()
        fake_gemini.generate_itinerary.side_effect = ItineraryGenerationError("Failed to generate travel itinerary")

        with pytest.raises(ItineraryGenerationError):
            await TripPlanner(session, fake_gemini, fake_qloo, test_settings).plan_trip("anywhere")

        assert await count_travel_plans(session) == 0

    @pytest.mark.asyncio
    async def test_model_id_cannot_replace_seeded_plan(self, seeded_session, test_settings, fake_gemini, fake_qloo, sample_plan):
        fake_gemini.parse_user_interests.return_value = ParsedInterests()
        fake_qloo.get_recommendations.return_value = Recommendations()
        fake_gemini.generate_itinerary.return_value = sample_plan.model_copy(update={"id": "swiss-alps"})

        trip = await TripPlanner(seeded_session, fake_gemini, fake_qloo, test_settings).plan_trip("Lisbon")

        assert trip.plan.id != "swiss-alps"
        seeded = await get_travel_plan(seeded_session, "swiss-alps")
        assert seeded.destination == "Swiss Alps, Switzerland"
        assert seeded.source == PlanSource.SEED
        assert (await get_travel_plan(seeded_session, trip.plan.id)).destination == "Lisbon, Portugal"

    @pytest.mark.asyncio
    async def test_repeated_model_id_keeps_both_plans(self, session, test_settings, fake_gemini, fake_qloo, sample_plan):
        fake_gemini.parse_user_interests.return_value = ParsedInterests()
        fake_qloo.get_recommendations.return_value = Recommendations()
        fake_gemini.generate_itinerary.side_effect = [
            sample_plan.model_copy(update={"id": "unique-trip-id", "destination": "Lisbon, Portugal"}),
            sample_plan.model_copy(update={"id": "unique-trip-id", "destination": "Oslo, Norway"}),
        ]
        planner = TripPlanner(session, fake_gemini, fake_qloo, test_settings)

        first = await planner.plan_trip("user A")
        second = await planner.plan_trip("user B")

        assert first.plan.id != second.plan.id
        assert await count_travel_plans(session, source=PlanSource.GENERATED) == 2
        assert (await get_travel_plan(session, first.plan.id)).request_text == "user A"
        assert (await get_travel_plan(session, second.plan.id)).destination == "Oslo, Norway"
        assert await get_travel_plan(session, "unique-trip-id") is None
