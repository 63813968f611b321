from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from pickem.models.week import UtcDateTime


class UserProfile(BaseModel):
    """Saldo y contadores de un usuario dentro de un tenant"""

    id: str = Field(..., alias="_id")  # app_id:user_id
    app_id: str
    user_id: str
    username: str

    predictor_points: int  # stake currency, debited on entry
    winner_bucks: float  # payout currency, credited on settlement

    weekly_entries: dict[str, int] = {}  # week_id -> entries made, refunds decrement
    entry_sequence: dict[str, int] = {}  # week_id -> last entry number, never decremented

    # submission id -> Winner Bucks already credited for it
    winner_bucks_credits: dict[str, float] = {}

    created_at: Optional[UtcDateTime] = None

    class Config:
        populate_by_name = True

    def entries_for_week(self, week_id: str) -> int:
        return self.weekly_entries.get(week_id, 0)

    def last_entry_number(self, week_id: str) -> int:
        return self.entry_sequence.get(week_id, 0)


class ProfileResponse(BaseModel):
    user_id: str
    username: str
    predictor_points: int
    winner_bucks: float
    weekly_entries: dict[str, int]
    created_at: Optional[datetime] = None


def default_username(user_id: str) -> str:
    return f"User_{user_id[:4]}"
