"""
OddsService - the "fetch current odds" trigger.

Pulls the odds feed, folds it into the current week and returns the
week's game list.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.models.week import Game
from pickem.services.odds_client import OddsApiClient
from pickem.services.odds_normalizer import normalize_odds_batch
from pickem.services.week_service import WeekService

logger = logging.getLogger(__name__)


class OddsService:
    def __init__(self, db: AsyncIOMotorDatabase, odds_client: OddsApiClient, week_timezone: str):
        self.odds_client = odds_client
        self.week_service = WeekService(db, week_timezone)

    async def fetch_current_odds(self, app_id: str, now: Optional[datetime] = None) -> dict:
        """
        Refresh the current week's games from the odds feed.

        Raises OddsConfigurationError before touching the store when no API
        key is set, and OddsProviderError/OddsPayloadError when the feed fails.
        """
        self.odds_client.ensure_configured()
        now = now or datetime.now(timezone.utc)

        raw_odds = await self.odds_client.get_odds()
        fragments = normalize_odds_batch(raw_odds)

        week = await self.week_service.get_or_create_current_week(app_id, now)
        update = await self.week_service.apply_provider_data(week, fragments, [])

        games: list[Game] = update.week.games
        logger.info(
            f"Fetched odds for {update.week.week_id}: {len(games)} games "
            f"({len(update.merge.added)} new)"
        )

        return {
            "success": True,
            "message": f"NFL Week {update.week.week_id} games updated.",
            "week_id": update.week.week_id,
            "games": games,
        }
