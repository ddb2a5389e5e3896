import os
import tempfile
from pathlib import Path

# Must be set before app.core.settings is first imported
os.environ["DB_URL"] = "sqlite:///:memory:"
os.environ["ENABLE_RATE_LIMITING"] = "false"
os.environ["GEMINI_API_KEY"] = ""
os.environ["QLOO_API_KEY"] = ""
os.environ["CHAT_MODE"] = "catalog"
os.environ["LOG_FILE"] = str(Path(tempfile.gettempdir()) / "travel-planner-tests.log")

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.api.schemas import TravelPlanRead
from app.core.conversation import ConversationStore
from app.core.settings import Settings
from app.db.session import DatabaseManager
from scripts.seed_catalog import CatalogSeeder, SeedingConfig, load_seed_file

SEED_CONFIG = SeedingConfig()


def sample_plan_data(plan_id="trip-1", destination="Lisbon, Portugal"):
    return {
        "id": plan_id,
        "destination": destination,
        "duration": 2,
        "mapCenter": {"lat": 38.7223, "lng": -9.1393},
        "preferences": ["food", "history"],
        "costBreakdown": {"accommodation": 400, "food": 150, "transport": 50, "activities": 60, "total": 660},
        "itinerary": [
            {
                "day": 1,
                "date": "2025-05-01",
                "totalCost": 120,
                "activities": [
                    {"id": "a1", "time": "09:00", "title": "Belem Tower", "location": "Belem",
                     "coordinates": {"lat": 38.6916, "lng": -9.2160}, "cost": 10, "type": "attraction"},
                    {"id": "a2", "time": "12:00", "title": "Pasteis de Belem", "location": "Belem",
                     "coordinates": {"lat": 38.6975, "lng": -9.2033}, "cost": 10, "type": "restaurant"},
                    {"id": "a3", "time": "15:00", "title": "Walking tour", "location": "Alfama",
                     "cost": 0, "type": "attraction"},
                ],
            },
            {
                "day": 2,
                "date": "2025-05-02",
                "totalCost": 80,
                "activities": [
                    {"id": "b1", "time": "10:00", "title": "Sintra day trip", "location": "Sintra",
                     "coordinates": {"lat": 38.7979, "lng": -9.3906}, "cost": 40, "type": "transport"},
                ],
            },
        ],
    }


@pytest.fixture
def plan_data():
    return sample_plan_data()


@pytest.fixture
def sample_plan():
    return TravelPlanRead.model_validate(sample_plan_data())


@pytest.fixture
def test_settings():
    return Settings(DB_URL="sqlite:///:memory:", GEMINI_API_KEY="", QLOO_API_KEY="")


@pytest_asyncio.fixture
async def db(test_settings):
    """Fresh in-memory database with tables created"""
    manager = DatabaseManager(test_settings)
    await manager.initialize()
    await manager.init_db()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def session(db):
    async with db.get_session() as s:
        yield s


async def seed_session(session):
    seeder = CatalogSeeder(SEED_CONFIG)
    await seeder.seed_destinations(session, load_seed_file(SEED_CONFIG.destinations_file))
    await seeder.seed_travel_plans(session, load_seed_file(SEED_CONFIG.travel_plans_file))
    return seeder.stats


@pytest_asyncio.fixture
async def seeded_session(session):
    await seed_session(session)
    return session


@pytest.fixture
def fake_gemini():
    gemini = MagicMock()
    gemini.parse_user_interests = AsyncMock()
    gemini.generate_itinerary = AsyncMock()
    gemini.get_travel_suggestions = AsyncMock(return_value=[])
    return gemini


@pytest.fixture
def fake_qloo():
    qloo = MagicMock()
    qloo.get_recommendations = AsyncMock()
    qloo.search_venues = AsyncMock(return_value=[])
    qloo.close = AsyncMock()
    return qloo


@pytest.fixture
def app_factory(fake_gemini, fake_qloo):
    """
    Builds a TestClient over the real app with an in-memory database.

    Entering the client runs the lifespan, which creates the tables on the
    shared manager; seeding then runs on the client's own event loop.
    """
    from app.main import app
    from app.api.chat import get_conversation_store
    from app.core.llm.gemini import get_gemini_client
    from app.core.recommender.qloo import get_qloo_client
    from app.core.settings import get_settings
    from app.db.session import db_manager

    clients = []

    def build(seed=True, **settings_overrides):
        store = ConversationStore()
        app.dependency_overrides[get_gemini_client] = lambda: fake_gemini
        app.dependency_overrides[get_qloo_client] = lambda: fake_qloo
        app.dependency_overrides[get_conversation_store] = lambda: store
        if settings_overrides:
            overridden = get_settings().model_copy(update=settings_overrides)
            app.dependency_overrides[get_settings] = lambda: overridden

        client = TestClient(app)
        client.__enter__()
        clients.append(client)

        if seed:
            async def _seed():
                async with db_manager.get_session() as s:
                    await seed_session(s)
            client.portal.call(_seed)
        client.store = store
        return client

    yield build

    for client in clients:
        client.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_factory):
    return app_factory()
