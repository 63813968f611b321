"""
📅 WeekRepository - weekly game lists

One document per tenant and week, _id = f"{app_id}:{week_id}".
Game list writes are compare-and-set on the `version` counter.
"""

from datetime import datetime, timezone
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.models.week import Game, Week, WeekInfo


def week_doc_id(app_id: str, week_id: str) -> str:
    return f"{app_id}:{week_id}"


class WeekRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["weeks"]

    # ============================================
    # 📌 READ
    # ============================================

    async def get(self, app_id: str, week_id: str) -> Optional[Week]:
        doc = await self.collection.find_one({"_id": week_doc_id(app_id, week_id)})
        return Week(**doc) if doc else None

    # ============================================
    # 📌 CREATE
    # ============================================

    async def get_or_create(self, app_id: str, info: WeekInfo) -> Week:
        """
        Return the week, creating it with only its temporal fields if missing.

        $setOnInsert makes concurrent creators converge on one document.
        """
        await self.collection.update_one(
            {"_id": week_doc_id(app_id, info.week_id)},
            {
                "$setOnInsert": {
                    "app_id": app_id,
                    "week_id": info.week_id,
                    "betting_window_start": info.betting_window_start,
                    "betting_window_end": info.betting_window_end,
                    "picks_reveal_time": info.picks_reveal_time,
                    "tie_breaker_game_id": None,
                    "actual_tie_breaker_total_points": None,
                    "games": [],
                    "version": 0,
                    "last_updated": datetime.now(timezone.utc),
                }
            },
            upsert=True,
        )
        return await self.get(app_id, info.week_id)

    # ============================================
    # 📌 UPDATE
    # ============================================

    async def save_games(
        self,
        week: Week,
        games: list[Game],
        tie_breaker_game_id: Optional[str],
        actual_tie_breaker_total_points: Optional[int],
    ) -> bool:
        """
        Persist a merged game list built from `week`.

        Only applies if nobody wrote the week since it was read; returns
        False when the write lost that race.
        """
        result = await self.collection.update_one(
            {"_id": week.id, "version": week.version},
            {
                "$set": {
                    "games": [game.model_dump() for game in games],
                    "tie_breaker_game_id": tie_breaker_game_id,
                    "actual_tie_breaker_total_points": actual_tie_breaker_total_points,
                    "last_updated": datetime.now(timezone.utc),
                },
                "$inc": {"version": 1},
            },
        )
        return result.matched_count == 1
