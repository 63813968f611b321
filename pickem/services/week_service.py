import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.models.week import OddsFragment, ScoreFragment, Week, WeekInfo
from pickem.repositories.week_repository import WeekRepository
from pickem.services.game_merge import (
    MergeResult,
    merge_games,
    resolve_tie_breaker_total,
    select_tie_breaker_game,
)
from pickem.services.week_clock import get_week_info

logger = logging.getLogger(__name__)


class WeekServiceError(Exception):
    pass


class WeekNotFoundError(WeekServiceError):
    pass


@dataclass
class WeekUpdate:
    week: Week
    merge: MergeResult
    persisted: bool  # False when another writer got there first


class WeekService:
    def __init__(self, db: AsyncIOMotorDatabase, week_timezone: str):
        self.week_repo = WeekRepository(db)
        self.week_timezone = week_timezone

    def current_week_info(self, now: datetime) -> WeekInfo:
        return get_week_info(now, self.week_timezone)

    async def get_week(self, app_id: str, week_id: str) -> Week:
        week = await self.week_repo.get(app_id, week_id)
        if not week:
            raise WeekNotFoundError(f"Week {week_id} not found")
        return week

    async def get_or_create_current_week(self, app_id: str, now: datetime) -> Week:
        return await self.week_repo.get_or_create(app_id, self.current_week_info(now))

    async def apply_provider_data(
        self,
        week: Week,
        odds: list[OddsFragment],
        scores: list[ScoreFragment],
    ) -> WeekUpdate:
        """
        Merge fresh fragments into `week` and persist the result.

        The tie-breaker game is chosen once, the first time games are known,
        and its total is recorded once, when it first completes. If the week
        changed underneath us the write is dropped and the stored week is
        returned instead.
        """
        merge = merge_games(week.games, odds, scores)

        tie_breaker_game_id: Optional[str] = week.tie_breaker_game_id
        if tie_breaker_game_id is None:
            tie_breaker_game_id = select_tie_breaker_game(merge.games)

        actual_total = resolve_tie_breaker_total(
            merge.games, tie_breaker_game_id, week.actual_tie_breaker_total_points
        )

        unchanged = (
            not merge.changed
            and tie_breaker_game_id == week.tie_breaker_game_id
            and actual_total == week.actual_tie_breaker_total_points
        )
        if unchanged:
            return WeekUpdate(week=week, merge=merge, persisted=True)

        saved = await self.week_repo.save_games(week, merge.games, tie_breaker_game_id, actual_total)
        if not saved:
            logger.warning(
                f"Week {week.week_id} was updated concurrently, keeping the stored version"
            )
            return WeekUpdate(
                week=await self.get_week(week.app_id, week.week_id),
                merge=merge,
                persisted=False,
            )

        if actual_total is not None and week.actual_tie_breaker_total_points is None:
            logger.info(f"Tie-breaker total for {week.week_id} recorded: {actual_total}")

        return WeekUpdate(
            week=week.model_copy(update={
                "games": merge.games,
                "tie_breaker_game_id": tie_breaker_game_id,
                "actual_tie_breaker_total_points": actual_total,
                "version": week.version + 1,
            }),
            merge=merge,
            persisted=True,
        )
