"""
Leaderboard controller - weekly rankings

Leaderboards are built by the reconciliation pass once a week is final.
This controller only serves what is stored.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from pickem.core.dependencies import AppId, Database
from pickem.models.leaderboard import LeaderboardEntry
from pickem.repositories.leaderboard_repository import LeaderboardRepository


router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


class LeaderboardResponse(BaseModel):
    """Weekly leaderboard with the tie-breaker result."""
    week_id: str
    entries: list[LeaderboardEntry]
    actual_tie_breaker_total_points: int
    user_position: Optional[LeaderboardEntry] = None


@router.get("/{week_id}", response_model=LeaderboardResponse)
async def get_week_leaderboard(
    week_id: str,
    db: Database,
    app_id: AppId,
    user_id: Optional[str] = None
):
    """
    Get the leaderboard of a week.

    404 until every game of the week is final.
    """
    leaderboard = await LeaderboardRepository(db).get(app_id, week_id)
    if not leaderboard:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Leaderboard for {week_id} not available yet"
        )

    user_position = None
    if user_id:
        user_position = next((e for e in leaderboard.entries if e.user_id == user_id), None)

    return LeaderboardResponse(
        week_id=leaderboard.week_id,
        entries=leaderboard.entries,
        actual_tie_breaker_total_points=leaderboard.actual_tie_breaker_total_points,
        user_position=user_position
    )
