"""
LeaderboardRepository - weekly leaderboards, replaced wholesale on each build.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.models.leaderboard import Leaderboard
from pickem.repositories.week_repository import week_doc_id


class LeaderboardRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["leaderboards"]

    async def get(self, app_id: str, week_id: str) -> Optional[Leaderboard]:
        doc = await self.collection.find_one({"_id": week_doc_id(app_id, week_id)})
        return Leaderboard(**doc) if doc else None

    async def replace(self, leaderboard: Leaderboard) -> Leaderboard:
        """Create or fully replace the week's leaderboard."""
        await self.collection.replace_one(
            {"_id": leaderboard.id},
            leaderboard.model_dump(by_alias=True),
            upsert=True,
        )
        return leaderboard
