from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from pickem.models.pick import Pick
from pickem.models.week import UtcDateTime


class Submission(BaseModel):
    """Entrada semanal de un usuario (una de hasta 3 por semana)"""

    id: str = Field(..., alias="_id")  # app_id:user_id:week_id:entry_number

    app_id: str
    user_id: str
    week_id: str
    entry_number: int

    picks: dict[str, Pick]  # game_id -> pick
    tie_breaker_points: int
    tier: int

    submitted_at: UtcDateTime

    # Written only by settlement
    is_settled: bool = False
    total_correct_picks: int = 0
    total_winner_bucks_won: float = 0.0
    credit_pending: bool = False  # total grew, profile not credited yet

    class Config:
        populate_by_name = True


class SubmissionCreate(BaseModel):
    """Payload to create an entry"""

    user_id: str
    picks: dict[str, str]  # game_id -> team name
    tie_breaker_points: Optional[int] = None
    tier: int


class SubmissionResponse(BaseModel):
    id: str
    user_id: str
    week_id: str
    entry_number: int
    picks: dict[str, Pick]
    tie_breaker_points: int
    tier: int
    submitted_at: datetime
    is_settled: bool
    total_correct_picks: int
    total_winner_bucks_won: float

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionResponse":
        return cls(**submission.model_dump(exclude={"app_id"}))
