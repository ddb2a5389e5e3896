"""
Gemini client behaviour against a fake google-genai client.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.schemas import ParsedInterests, Recommendations
from app.core.llm.gemini import (
    GeminiClient, ItineraryGenerationError, LLMUnavailableError,
    DEFAULT_MAP_CENTER, parse_json_reply, strip_code_fences, fallback_interests,
)
from app.core.settings import Settings


def fake_genai(*replies):
    """A stand-in for genai.Client whose async generate_content returns the given texts in order"""
    client = MagicMock()
    side_effect = [r if isinstance(r, Exception) else SimpleNamespace(text=r) for r in replies]
    client.aio.models.generate_content = AsyncMock(side_effect=side_effect)
    return client


def make_client(*replies, **settings):
    genai_client = fake_genai(*replies)
    return GeminiClient(Settings(**settings), client=genai_client), genai_client


class TestReplyParsing:
    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_parse_json_reply_rejects_prose(self):
        with pytest.raises(ValueError):
            parse_json_reply("Sure! Here is your trip.")

    def test_fallback_interests_keywords(self):
        interests = fallback_interests("I love ramen and anime in Tokyo")
        assert interests.interests == ["I love ramen and anime in Tokyo"]
        assert interests.keywords == ["love", "ramen", "anime", "Tokyo"]
        assert interests.travel_style == "mid-range"
        assert interests.duration == 5


class TestParseUserInterests:
    @pytest.mark.asyncio
    async def test_parses_fenced_json(self):
        reply = "```json\n" + json.dumps({
            "interests": ["BTS", "K-pop"],
            "preferences": {"cultural": ["k-pop"], "food": ["korean bbq"], "activities": [], "atmosphere": []},
            "keywords": ["seoul"],
            "travelStyle": "Luxury",
            "duration": "7 days",
        }) + "\n```"
        gemini, genai_client = make_client(reply)

        interests = await gemini.parse_user_interests("I love BTS")

        assert interests.interests == ["BTS", "K-pop"]
        assert interests.preferences.food == ["korean bbq"]
        assert interests.travel_style == "luxury"
        assert interests.duration == 7
        kwargs = genai_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert "I love BTS" in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_model_error_falls_back(self):
        gemini, _ = make_client(RuntimeError("quota exceeded"))
        interests = await gemini.parse_user_interests("mountain hiking trip")
        assert interests.interests == ["mountain hiking trip"]
        assert interests.keywords == ["mountain", "hiking", "trip"]

    @pytest.mark.asyncio
    async def test_missing_key_falls_back(self):
        gemini = GeminiClient(Settings(GEMINI_API_KEY=""))
        interests = await gemini.parse_user_interests("beach week")
        assert interests.interests == ["beach week"]

    @pytest.mark.asyncio
    async def test_non_object_reply_falls_back(self):
        gemini, _ = make_client('["just", "a", "list"]')
        interests = await gemini.parse_user_interests("wine tasting")
        assert interests.interests == ["wine tasting"]


class TestComplete:
    @pytest.mark.asyncio
    async def test_empty_reply_is_unavailable(self):
        gemini, _ = make_client("")
        with pytest.raises(LLMUnavailableError):
            await gemini.complete("hello")

    @pytest.mark.asyncio
    async def test_no_key_is_unavailable(self):
        with pytest.raises(LLMUnavailableError):
            await GeminiClient(Settings(GEMINI_API_KEY="")).complete("hello")


class TestGenerateItinerary:
    @pytest.mark.asyncio
    async def test_fills_id_and_map_center(self, plan_data):
        plan_data.pop("id")
        plan_data.pop("mapCenter")
        gemini, genai_client = make_client(json.dumps(plan_data))

        plan = await gemini.generate_itinerary(ParsedInterests(duration=2), Recommendations(), budget=1800)

        assert plan.id.startswith("trip-")
        assert plan.map_center.lat == DEFAULT_MAP_CENTER["lat"]
        assert plan.map_center.lng == DEFAULT_MAP_CENTER["lng"]
        assert len(plan.itinerary) == 2
        prompt = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        assert "1800" in prompt

    @pytest.mark.asyncio
    async def test_keeps_model_id(self, plan_data):
        gemini, _ = make_client(json.dumps(plan_data))
        plan = await gemini.generate_itinerary(ParsedInterests(), Recommendations())
        assert plan.id == "trip-1"

    @pytest.mark.asyncio
    async def test_overlong_model_id_raises(self, plan_data):
        plan_data["id"] = "x" * 101
        gemini, _ = make_client(json.dumps(plan_data))
        with pytest.raises(ItineraryGenerationError):
            await gemini.generate_itinerary(ParsedInterests(), Recommendations())

    @pytest.mark.asyncio
    async def test_unparseable_reply_raises(self):
        gemini, _ = make_client("I could not plan that")
        with pytest.raises(ItineraryGenerationError, match="Failed to generate travel itinerary"):
            await gemini.generate_itinerary(ParsedInterests(), Recommendations())

    @pytest.mark.asyncio
    async def test_invalid_shape_raises(self):
        gemini, _ = make_client(json.dumps({"destination": "Nowhere"}))
        with pytest.raises(ItineraryGenerationError):
            await gemini.generate_itinerary(ParsedInterests(), Recommendations())

    @pytest.mark.asyncio
    async def test_model_failure_raises(self):
        gemini, _ = make_client(RuntimeError("timeout"))
        with pytest.raises(ItineraryGenerationError):
            await gemini.generate_itinerary(ParsedInterests(), Recommendations())


class TestTravelSuggestions:
    @pytest.mark.asyncio
    async def test_keeps_valid_suggestions_only(self):
        reply = json.dumps([
            {
                "id": "lisbon", "name": "Lisbon", "country": "Portugal",
                "description": "Hills and trams", "image": "https://example.com/l.jpg",
                "highlights": ["Alfama"], "estimatedCost": 1800, "duration": 5,
                "coordinates": {"lat": 38.72, "lng": -9.14}, "matchScore": 88,
            },
            {"id": "broken"},
        ])
        gemini, genai_client = make_client(reply, GEMINI_SUGGESTIONS_MODEL="gemini-2.5-pro")

        suggestions = await gemini.get_travel_suggestions("sunny city break")

        assert [s.id for s in suggestions] == ["lisbon"]
        assert suggestions[0].duration == "5 days"
        assert genai_client.aio.models.generate_content.call_args.kwargs["model"] == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self):
        gemini, _ = make_client(RuntimeError("boom"))
        assert await gemini.get_travel_suggestions("anything") == []

    @pytest.mark.asyncio
    async def test_object_reply_returns_empty(self):
        gemini, _ = make_client('{"id": "lisbon"}')
        assert await gemini.get_travel_suggestions("anything") == []
