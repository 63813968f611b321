from typing import Optional
from pydantic import BaseModel, Field

from pickem.models.week import UtcDateTime


class LeaderboardEntry(BaseModel):
    """Entrada en la tabla de clasificación semanal"""

    rank: int
    user_id: str
    username: str
    entry_number: int = 1

    total_correct_picks: int
    total_winner_bucks_won: float
    tie_breaker_points: int

    class Config:
        populate_by_name = True


class Leaderboard(BaseModel):
    """Clasificación de una semana, se reemplaza completa en cada build"""

    id: str = Field(..., alias="_id")  # app_id:week_id
    app_id: str
    week_id: str

    entries: list[LeaderboardEntry] = []
    actual_tie_breaker_total_points: int

    last_updated: Optional[UtcDateTime] = None

    class Config:
        populate_by_name = True
