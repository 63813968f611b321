"""
🎯 SubmissionRepository - weekly entries

Composite IDs: app_id:user_id:week_id:entry_number
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from pickem.models.submission import Submission


def submission_doc_id(app_id: str, user_id: str, week_id: str, entry_number: int) -> str:
    return f"{app_id}:{user_id}:{week_id}:{entry_number}"


class SubmissionRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["submissions"]

    # ============================================
    # 📌 CREATE
    # ============================================

    async def create(self, submission: Submission) -> Submission:
        submission_dict = submission.model_dump(by_alias=True)

        try:
            await self.collection.insert_one(submission_dict)
            return submission
        except DuplicateKeyError:
            raise ValueError(f"Submission {submission.id} already exists")

    # ============================================
    # 📌 READ
    # ============================================

    async def get_by_id(self, submission_id: str) -> Optional[Submission]:
        doc = await self.collection.find_one({"_id": submission_id})
        return Submission(**doc) if doc else None

    async def _find(self, query: dict) -> list[Submission]:
        # Submission order feeds the leaderboard's final tie-break
        cursor = self.collection.find(query).sort([("submitted_at", 1), ("_id", 1)])
        docs = await cursor.to_list(length=None)
        return [Submission(**doc) for doc in docs]

    async def get_unsettled_for_week(self, app_id: str, week_id: str) -> list[Submission]:
        return await self._find({"app_id": app_id, "week_id": week_id, "is_settled": False})

    async def get_settled_for_week(self, app_id: str, week_id: str) -> list[Submission]:
        return await self._find({"app_id": app_id, "week_id": week_id, "is_settled": True})

    async def get_pending_credits(self, app_id: str, week_id: str) -> list[Submission]:
        return await self._find({"app_id": app_id, "week_id": week_id, "credit_pending": True})

    async def get_user_submissions_for_week(
        self,
        app_id: str,
        user_id: str,
        week_id: str
    ) -> list[Submission]:
        return await self._find({"app_id": app_id, "user_id": user_id, "week_id": week_id})

    # ============================================
    # 📌 UPDATE
    # ============================================

    async def apply_settlement(
        self,
        submission: Submission,
        picks: dict,
        total_correct_picks: int,
        total_winner_bucks_won: float,
        is_settled: bool,
        credit_pending: bool = False,
    ) -> Optional[Submission]:
        """
        🔥 Store a settlement result computed from `submission`

        Matches only while the document is unsettled and still carries the
        totals it was read with, so two overlapping passes cannot both apply
        the same result. `credit_pending` flags a grown total for the
        credit step; it is only ever raised here. Returns None when it lost.
        """
        fields = {
            "picks": {game_id: pick.model_dump() for game_id, pick in picks.items()},
            "total_correct_picks": total_correct_picks,
            "total_winner_bucks_won": total_winner_bucks_won,
            "is_settled": is_settled,
        }
        if credit_pending:
            fields["credit_pending"] = True

        result = await self.collection.find_one_and_update(
            {
                "_id": submission.id,
                "is_settled": False,
                "total_correct_picks": submission.total_correct_picks,
                "total_winner_bucks_won": submission.total_winner_bucks_won,
            },
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

        return Submission(**result) if result else None

    async def clear_credit_pending(self, submission: Submission) -> bool:
        """
        Mark the submission's total as credited.

        Stays pending if settlement raised the total again in the meantime.
        """
        result = await self.collection.update_one(
            {
                "_id": submission.id,
                "total_winner_bucks_won": submission.total_winner_bucks_won,
            },
            {"$set": {"credit_pending": False}},
        )
        return result.matched_count == 1
