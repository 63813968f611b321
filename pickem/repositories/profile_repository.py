"""
ProfileRepository - MongoDB access for the profiles collection.

Balances are only changed through atomic $inc updates.
"""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from pickem.models.user import UserProfile, default_username


def profile_doc_id(app_id: str, user_id: str) -> str:
    return f"{app_id}:{user_id}"


class ProfileRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["profiles"]

    async def get(self, app_id: str, user_id: str) -> Optional[UserProfile]:
        """Get a profile by tenant and user."""
        doc = await self.collection.find_one({"_id": profile_doc_id(app_id, user_id)})
        return UserProfile(**doc) if doc else None

    async def get_usernames(self, app_id: str, user_ids: list[str]) -> dict[str, str]:
        """Map user_id -> username for the given users."""
        cursor = self.collection.find(
            {"_id": {"$in": [profile_doc_id(app_id, u) for u in user_ids]}},
            {"user_id": 1, "username": 1},
        )
        docs = await cursor.to_list(length=None)
        return {doc["user_id"]: doc["username"] for doc in docs}

    async def get_or_create(
        self,
        app_id: str,
        user_id: str,
        predictor_points: int,
        winner_bucks: float,
        username: Optional[str] = None,
    ) -> UserProfile:
        """Create the default profile on first access."""
        await self.collection.update_one(
            {"_id": profile_doc_id(app_id, user_id)},
            {
                "$setOnInsert": {
                    "app_id": app_id,
                    "user_id": user_id,
                    "username": username or default_username(user_id),
                    "predictor_points": predictor_points,
                    "winner_bucks": winner_bucks,
                    "weekly_entries": {},
                    "entry_sequence": {},
                    "winner_bucks_credits": {},
                    "created_at": datetime.now(timezone.utc),
                }
            },
            upsert=True,
        )
        return await self.get(app_id, user_id)

    async def reserve_entry(
        self,
        app_id: str,
        user_id: str,
        week_id: str,
        cost: int,
        max_entries: int,
    ) -> Optional[UserProfile]:
        """
        Debit the entry cost, count the entry and take the next entry
        number in one atomic update.

        Returns None when the balance or the weekly cap no longer allows it.
        """
        entries_field = f"weekly_entries.{week_id}"

        result = await self.collection.find_one_and_update(
            {
                "_id": profile_doc_id(app_id, user_id),
                "predictor_points": {"$gte": cost},
                "$or": [
                    {entries_field: {"$exists": False}},
                    {entries_field: {"$lt": max_entries}},
                ],
            },
            {
                "$inc": {
                    "predictor_points": -cost,
                    entries_field: 1,
                    f"entry_sequence.{week_id}": 1,
                }
            },
            return_document=ReturnDocument.AFTER,
        )

        return UserProfile(**result) if result else None

    async def release_entry(self, app_id: str, user_id: str, week_id: str, cost: int) -> None:
        """
        Undo reserve_entry when the entry could not be stored.

        The entry number stays taken so a later entry never reuses it.
        """
        await self.collection.update_one(
            {"_id": profile_doc_id(app_id, user_id)},
            {"$inc": {"predictor_points": cost, f"weekly_entries.{week_id}": -1}},
        )

    async def apply_credit(
        self,
        profile: UserProfile,
        submission_id: str,
        total_winner_bucks_won: float,
    ) -> Optional[float]:
        """
        Bring the Winner Bucks credited for one submission up to its total.

        The balance and the per-submission ledger move in the same update,
        guarded on the ledger value that was read, so repeating the call
        never credits twice. Returns the amount credited, or None when another
        pass moved the ledger first.
        """
        credited = profile.winner_bucks_credits.get(submission_id)
        amount = round(total_winner_bucks_won - (credited or 0.0), 2)
        if amount <= 0:
            return 0.0

        ledger_field = f"winner_bucks_credits.{submission_id}"
        guard = {ledger_field: credited} if credited is not None else {ledger_field: {"$exists": False}}

        result = await self.collection.update_one(
            {"_id": profile.id, **guard},
            {
                "$inc": {"winner_bucks": amount},
                "$set": {ledger_field: total_winner_bucks_won},
            },
        )
        return amount if result.matched_count == 1 else None
