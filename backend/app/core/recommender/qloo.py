"""Qloo taste API client: travel, dining and entertainment recommendations for parsed interests."""

from functools import lru_cache
from typing import Any, Dict, List, Optional

import httpx
import structlog

from app.api.schemas import ParsedInterests, Recommendations
from app.core.settings import Settings

logger = structlog.get_logger(__name__)

MAX_POSITIVE_TERMS = 5

# (recommendation bucket, Qloo type, result limit)
RECOMMENDATION_QUERIES = (
    ("destinations", "travel", 10),
    ("restaurants", "dining", 15),
    ("attractions", "entertainment", 10),
)


def search_terms(interests: ParsedInterests) -> List[str]:
    terms = [
        *interests.interests,
        *interests.preferences.cultural,
        *interests.preferences.food,
        *interests.keywords,
    ]
    return [t for t in terms if t]


def _mentions(values: List[str], needle: str) -> bool:
    return any(needle in (v or "").lower() for v in values)


def fallback_recommendations(interests: ParsedInterests) -> Recommendations:
    """Keyword-matched recommendations used when the API can't be reached"""
    names = interests.interests or []
    cultural = interests.preferences.cultural or []
    food = interests.preferences.food or []

    destinations: List[Dict[str, Any]] = []
    restaurants: List[Dict[str, Any]] = []

    if _mentions(names, "bts") or _mentions(cultural, "k-pop"):
        destinations.append({
            "id": "seoul-korea",
            "name": "Seoul",
            "country": "South Korea",
            "description": "K-pop capital and cultural hub",
            "type": "city",
        })

    if _mentions(names, "ghibli") or _mentions(cultural, "anime"):
        destinations.append({
            "id": "tokyo-japan",
            "name": "Tokyo",
            "country": "Japan",
            "description": "Anime and manga paradise",
            "type": "city",
        })

    if _mentions(food, "ramen") or _mentions(names, "ramen"):
        restaurants.append({
            "id": "ramen-spots",
            "name": "Authentic Ramen Houses",
            "type": "restaurant",
            "cuisine": "Japanese",
        })

    if not destinations:
        destinations = [
            {
                "id": "paris-france",
                "name": "Paris",
                "country": "France",
                "description": "Cultural capital with world-class museums and cuisine",
                "type": "city",
            },
            {
                "id": "tokyo-japan",
                "name": "Tokyo",
                "country": "Japan",
                "description": "Perfect blend of traditional and modern culture",
                "type": "city",
            },
        ]

    return Recommendations(
        destinations=destinations,
        restaurants=restaurants,
        attractions=[],
        experiences=[],
    )


class QlooClient:
    """Adapter for the Qloo recommendations and search endpoints."""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or Settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def enabled(self) -> bool:
        return bool(self.settings.QLOO_API_KEY)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.QLOO_BASE_URL.rstrip("/"),
                timeout=self.settings.QLOO_TIMEOUT_SECONDS,
                headers={
                    "Authorization": f"Bearer {self.settings.QLOO_API_KEY}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post_results(self, path: str, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        resp = await self._get_client().post(path, json=body)
        resp.raise_for_status()
        payload = resp.json()
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            return []
        return [r for r in results if isinstance(r, dict)]

    async def get_recommendations(self, interests: ParsedInterests) -> Recommendations:
        """Three independent lookups; a failed lookup leaves its bucket empty."""
        if not self.enabled:
            logger.warning("qloo_api_key_missing", detail="using fallback recommendations")
            return fallback_recommendations(interests)

        try:
            terms = search_terms(interests)
            positives = {
                "travel": terms[:MAX_POSITIVE_TERMS],
                "dining": [*interests.preferences.food, *terms][:MAX_POSITIVE_TERMS],
                "entertainment": [*interests.preferences.cultural, *terms][:MAX_POSITIVE_TERMS],
            }

            buckets: Dict[str, List[Dict[str, Any]]] = {
                "destinations": [], "restaurants": [], "attractions": [], "experiences": [],
            }
            for bucket, qloo_type, limit in RECOMMENDATION_QUERIES:
                body: Dict[str, Any] = {
                    "type": qloo_type,
                    "input": {"positive": positives[qloo_type], "negative": []},
                    "limit": limit,
                }
                if qloo_type == "travel":
                    body["geo"] = {"country": "global"}
                try:
                    buckets[bucket] = await self._post_results("/recommendations", body)
                except (httpx.HTTPError, ValueError, TypeError) as e:
                    logger.warning("qloo_lookup_failed", type=qloo_type, error=str(e))

            logger.info(
                "qloo_recommendations",
                **{bucket: len(items) for bucket, items in buckets.items()},
            )
            return Recommendations(**buckets)

        except Exception as e:
            logger.error("qloo_recommendations_failed", error=str(e), error_type=type(e).__name__)
            return fallback_recommendations(interests)

    async def search_venues(self, query: str, location: str = "") -> List[Dict[str, Any]]:
        """Venue search; empty list without a key or on any failure."""
        if not self.enabled:
            return []
        try:
            return await self._post_results(
                "/search", {"query": query, "location": location, "limit": 10}
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("qloo_search_failed", query=query, error=str(e))
            return []


@lru_cache
def get_qloo_client() -> QlooClient:
    return QlooClient()
