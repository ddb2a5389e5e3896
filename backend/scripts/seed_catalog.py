#!/usr/bin/env python3
"""
Database Seeding Script for the destination catalog and stored itineraries

Loads data/seed/destinations.json and data/seed/travel_plans.json, validates
every record against the API shapes and upserts it by id.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.api.schemas import DestinationCreate, TravelPlanRead, destination_document, travel_plan_document
from app.core.settings import get_settings
from app.db.crud import upsert_destination, save_travel_plan
from app.db.models import PlanSource
from app.db.session import db_manager

logger = logging.getLogger(__name__)

SEED_DIR = PROJECT_ROOT / "data" / "seed"
LOG_FILE = "seed_catalog.log"


@dataclass
class SeedingConfig:
    """Configuration for database seeding"""
    destinations_file: Path = SEED_DIR / "destinations.json"
    travel_plans_file: Path = SEED_DIR / "travel_plans.json"
    max_errors: int = 50
    require_fallback_plan: bool = True


@dataclass
class SeedingStats:
    destinations_seeded: int = 0
    travel_plans_seeded: int = 0
    invalid_records: int = 0
    errors: List[str] = field(default_factory=list)


@asynccontextmanager
async def performance_timer(operation: str):
    """Context manager for timing operations"""
    start = time.time()
    try:
        yield
    finally:
        duration = time.time() - start
        logger.info(f"{operation} completed in {duration:.2f}s")


def load_seed_file(path: Path) -> List[Dict[str, Any]]:
    """A seed file is a JSON array of camelCase records"""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


class CatalogSeeder:
    def __init__(self, config: SeedingConfig):
        self.config = config
        self.stats = SeedingStats()

    def _record_error(self, message: str) -> None:
        logger.warning(message)
        self.stats.invalid_records += 1
        self.stats.errors.append(message)
        if len(self.stats.errors) >= self.config.max_errors:
            raise RuntimeError(f"Too many seeding errors ({len(self.stats.errors)})")

    async def seed_destinations(self, session, records: List[Dict[str, Any]]) -> int:
        for i, record in enumerate(records):
            try:
                destination = DestinationCreate.model_validate(record)
            except ValidationError as e:
                self._record_error(f"Invalid destination #{i} ({record.get('id')}): {e.error_count()} errors")
                continue
            await upsert_destination(session, destination_document(destination))
            self.stats.destinations_seeded += 1
        logger.info(f"Seeded {self.stats.destinations_seeded} destinations")
        return self.stats.destinations_seeded

    async def seed_travel_plans(self, session, records: List[Dict[str, Any]]) -> int:
        for i, record in enumerate(records):
            try:
                plan = TravelPlanRead.model_validate(record)
            except ValidationError as e:
                self._record_error(f"Invalid travel plan #{i} ({record.get('id')}): {e.error_count()} errors")
                continue
            await save_travel_plan(session, travel_plan_document(plan), source=PlanSource.SEED)
            self.stats.travel_plans_seeded += 1
        logger.info(f"Seeded {self.stats.travel_plans_seeded} travel plans")
        return self.stats.travel_plans_seeded

    def check_fallback(self, plan_records: List[Dict[str, Any]]) -> bool:
        fallback_id = get_settings().FALLBACK_DESTINATION_ID
        present = any(r.get("id") == fallback_id for r in plan_records)
        if not present:
            logger.warning(f"Seed data has no itinerary for fallback destination '{fallback_id}'")
        return present

    def print_summary(self) -> None:
        logger.info("=" * 50)
        logger.info("SEEDING SUMMARY")
        logger.info(f"Destinations seeded: {self.stats.destinations_seeded}")
        logger.info(f"Travel plans seeded: {self.stats.travel_plans_seeded}")
        logger.info(f"Invalid records:     {self.stats.invalid_records}")
        logger.info("=" * 50)


async def seed(config: SeedingConfig) -> SeedingStats:
    seeder = CatalogSeeder(config)

    destinations = load_seed_file(config.destinations_file)
    plans = load_seed_file(config.travel_plans_file)
    if not seeder.check_fallback(plans) and config.require_fallback_plan:
        raise RuntimeError("Fallback itinerary missing from seed data")

    async with performance_timer("database_setup"):
        await db_manager.initialize()
        await db_manager.init_db()

    try:
        async with db_manager.get_session() as session:
            async with performance_timer("destinations_seeding"):
                await seeder.seed_destinations(session, destinations)
            async with performance_timer("travel_plans_seeding"):
                await seeder.seed_travel_plans(session, plans)
    finally:
        await db_manager.close()

    seeder.print_summary()
    return seeder.stats


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed destinations and stored itineraries")
    parser.add_argument("--destinations", type=Path, default=SEED_DIR / "destinations.json")
    parser.add_argument("--plans", type=Path, default=SEED_DIR / "travel_plans.json")
    parser.add_argument("--allow-missing-fallback", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(LOG_FILE)
        ]
    )

    config = SeedingConfig(
        destinations_file=args.destinations,
        travel_plans_file=args.plans,
        require_fallback_plan=not args.allow_missing_fallback,
    )
    try:
        asyncio.run(seed(config))
    except (OSError, ValueError, RuntimeError, SQLAlchemyError) as e:
        logger.error(f"Seeding failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
