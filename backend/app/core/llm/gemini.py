"""
Gemini client: interest extraction, itinerary generation and destination suggestions.
"""

import json
import re
import time
from datetime import date, timedelta
from functools import lru_cache
from typing import Any, List, Optional

import structlog
from google import genai
from google.genai import types as genai_types
from pydantic import ValidationError

from app.api.schemas import (
    DestinationRead, ParsedInterests, InterestPreferences,
    Recommendations, TravelPlanRead,
)
from app.core.llm.prompts import (
    INTEREST_EXTRACTION_PROMPT, ITINERARY_PROMPT, SUGGESTIONS_PROMPT,
)
from app.core.settings import Settings

logger = structlog.get_logger(__name__)

DEFAULT_MAP_CENTER = {"lat": 35.6762, "lng": 139.6503}  # Tokyo

_FENCE_RE = re.compile(r"```(?:json)?\n?|```")


class LLMUnavailableError(RuntimeError):
    """Gemini cannot be called (no key, transport failure, empty reply)"""


class ItineraryGenerationError(RuntimeError):
    """The model did not produce a usable travel plan"""


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_reply(text: str) -> Any:
    """Parse a model reply that may be wrapped in a Markdown code fence"""
    return json.loads(strip_code_fences(text))


def fallback_interests(message: str) -> ParsedInterests:
    """Interests derived from the raw message when the model can't be used"""
    return ParsedInterests(
        interests=[message],
        preferences=InterestPreferences(),
        keywords=[word for word in message.split(" ") if len(word) > 3],
        travel_style="mid-range",
        duration=5,
    )


class GeminiClient:
    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or Settings()
        self._client = client
        logger.info(
            "gemini_client_configured",
            api_key="set" if (self.settings.GEMINI_API_KEY or client) else "missing",
            model=self.settings.GEMINI_MODEL,
        )

    def _get_client(self):
        if self._client is None:
            if not self.settings.GEMINI_API_KEY:
                raise LLMUnavailableError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(
                api_key=self.settings.GEMINI_API_KEY,
                http_options=genai_types.HttpOptions(
                    timeout=self.settings.GEMINI_TIMEOUT_SECONDS * 1000
                ),
            )
        return self._client

    async def complete(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or self.settings.GEMINI_MODEL
        start = time.time()
        try:
            response = await self._get_client().aio.models.generate_content(
                model=model,
                contents=prompt,
            )
        except LLMUnavailableError:
            raise
        except Exception as e:
            raise LLMUnavailableError(f"Gemini request failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise LLMUnavailableError("Gemini returned an empty response")
        logger.info(
            "gemini_completion",
            model=model,
            prompt_chars=len(prompt),
            reply_chars=len(text),
            duration_ms=round((time.time() - start) * 1000, 2),
        )
        return text

    async def parse_user_interests(self, message: str) -> ParsedInterests:
        """Structured interests for a free-text wish. Never raises."""
        prompt = INTEREST_EXTRACTION_PROMPT.format(
            message=message, default_days=self.settings.DEFAULT_TRIP_DAYS
        )
        try:
            data = parse_json_reply(await self.complete(prompt))
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return ParsedInterests.model_validate(data)
        except (LLMUnavailableError, ValueError, ValidationError) as e:
            logger.warning("interest_parse_fallback", error=str(e), error_type=type(e).__name__)
            return fallback_interests(message)

    async def generate_itinerary(
        self,
        interests: ParsedInterests,
        recommendations: Recommendations,
        budget: float = 2500,
        start_date: Optional[date] = None,
    ) -> TravelPlanRead:
        start_date = start_date or date.today() + timedelta(days=1)
        prompt = ITINERARY_PROMPT.format(
            interests_json=json.dumps(interests.model_dump(by_alias=True)),
            budget=f"{budget:.0f}",
            recommendations_json=json.dumps(recommendations.model_dump(), default=str),
            duration=interests.duration or self.settings.DEFAULT_TRIP_DAYS,
            start_date=start_date.isoformat(),
        )
        try:
            data = parse_json_reply(await self.complete(prompt))
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            if not data.get("id"):
                data["id"] = f"trip-{int(time.time() * 1000)}"
            if not data.get("mapCenter"):
                data["mapCenter"] = dict(DEFAULT_MAP_CENTER)
            plan = TravelPlanRead.model_validate(data)
        except (LLMUnavailableError, ValueError, ValidationError) as e:
            logger.error("itinerary_generation_failed", error=str(e), error_type=type(e).__name__)
            raise ItineraryGenerationError("Failed to generate travel itinerary") from e

        logger.info(
            "itinerary_generated",
            plan_id=plan.id,
            destination=plan.destination,
            days=len(plan.itinerary),
        )
        return plan

    async def get_travel_suggestions(self, message: str) -> List[DestinationRead]:
        """3-5 destination suggestions; empty list on any failure"""
        prompt = SUGGESTIONS_PROMPT.format(message=message)
        try:
            data = parse_json_reply(
                await self.complete(prompt, model=self.settings.GEMINI_SUGGESTIONS_MODEL)
            )
        except (LLMUnavailableError, ValueError) as e:
            logger.error("travel_suggestions_failed", error=str(e), error_type=type(e).__name__)
            return []

        if not isinstance(data, list):
            logger.error("travel_suggestions_failed", error="expected a JSON array")
            return []

        suggestions: List[DestinationRead] = []
        for item in data:
            try:
                suggestions.append(DestinationRead.model_validate(item))
            except ValidationError as e:
                logger.warning("travel_suggestion_dropped", error=str(e))
        return suggestions


@lru_cache
def get_gemini_client() -> GeminiClient:
    return GeminiClient()
